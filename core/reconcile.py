"""
Three-way diff of a submitted line-item list against persisted items.

The persisted set after applying a plan equals exactly the submitted set:
- persisted items missing from the submission are deleted
- submitted items whose id matches a persisted item of the same order are
  updated in place
- everything else is created fresh (no id, an unknown id, an id owned by
  another order, or an id already used earlier in the same submission)
"""

from dataclasses import dataclass, field
from typing import Any

from core.models import LineItem, PricedLineItem


@dataclass(frozen=True)
class LineItemUpdate:
    line_item_id: str
    fields: dict[str, Any]


@dataclass(frozen=True)
class ReconcilePlan:
    """Store writes needed to make an order's items match a submission."""

    to_delete: list[str] = field(default_factory=list)
    to_update: list[LineItemUpdate] = field(default_factory=list)
    to_create: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_delete or self.to_update or self.to_create)


def plan_line_items(existing: list[LineItem], submitted: list[PricedLineItem]) -> ReconcilePlan:
    """
    Compute the create/update/delete plan for one order.

    Args:
        existing: Items currently persisted for the order
        submitted: Priced items from this save, in display order

    Returns:
        ReconcilePlan. Position fields follow the submission order.
    """
    existing_ids = {item.id for item in existing}
    claimed: set[str] = set()
    to_update = []
    to_create = []

    for position, item in enumerate(submitted):
        fields = item.to_fields(position)
        if item.id is not None and item.id in existing_ids and item.id not in claimed:
            claimed.add(item.id)
            to_update.append(LineItemUpdate(line_item_id=item.id, fields=fields))
        else:
            to_create.append(fields)

    to_delete = [item.id for item in existing if item.id not in claimed]

    return ReconcilePlan(to_delete=to_delete, to_update=to_update, to_create=to_create)
