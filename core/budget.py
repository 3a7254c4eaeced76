"""
Budget aggregation for service order line items.

Pure, deterministic pricing: no storage, no side effects. Totals accumulate
in full Decimal precision; rounding to cents only happens at display time
(see core.money.format_money).
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from core.models import LineItemDraft, PricedLineItem
from core.money import ZERO, coerce_amount


@dataclass(frozen=True)
class PricedBudget:
    """Result of pricing a line-item list."""

    items: list[PricedLineItem]
    total: Decimal


def _read(item: LineItemDraft | Mapping[str, Any], *keys: str) -> Any:
    """Read the first present key from a raw mapping, or an attribute from a draft."""
    if isinstance(item, Mapping):
        for key in keys:
            if key in item:
                return item[key]
        return None
    return getattr(item, keys[0], None)


def price_item(item: LineItemDraft | Mapping[str, Any]) -> PricedLineItem:
    """
    Price one line item.

    Raw mappings may use snake_case or camelCase keys and carry loosely-typed
    numbers; missing or invalid amounts count as 0. Any total supplied by the
    caller is ignored.
    """
    quantity = coerce_amount(_read(item, "quantity"))
    unit_price = coerce_amount(_read(item, "unit_price", "unitPrice"))
    description = _read(item, "description")
    item_id = _read(item, "id")

    return PricedLineItem(
        id=str(item_id) if item_id not in (None, "") else None,
        description="" if description is None else str(description),
        quantity=quantity,
        unit_price=unit_price,
        total_price=quantity * unit_price,
    )


def sum_totals(totals: Iterable[Decimal]) -> Decimal:
    """Sum item totals without intermediate rounding."""
    return sum(totals, ZERO)


def price(items: Sequence[LineItemDraft | Mapping[str, Any]]) -> PricedBudget:
    """
    Price a line-item list and sum the budget.

    Args:
        items: Drafts or raw line-item mappings

    Returns:
        PricedBudget with one priced item per input (same order) and the
        budget total. The total is >= 0 whenever every input is >= 0;
        negative amounts are not clamped here.
    """
    priced = [price_item(item) for item in items]
    return PricedBudget(items=priced, total=sum_totals(p.total_price for p in priced))
