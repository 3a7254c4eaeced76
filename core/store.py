"""
Persistence contract for service orders and their line items.

The engine talks to storage only through this interface. A Store instance is
constructed once at process start and passed to OrderService; there is no
global connection state.

Payload rules:
- `fields` for create_order/update_order never carry None placeholders.
  A key that is absent leaves the stored value untouched.
- A field the caller cleared on edit is named in `clear`; the Store nulls it.
- Every failure is raised as core.exceptions.StoreError.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from core.models import LineItem, OrderRecord


class Store(ABC):
    """Abstract order/line-item store."""

    @abstractmethod
    def create_order(self, fields: dict[str, Any]) -> str:
        """Insert an order record and return its new id."""

    @abstractmethod
    def get_order(self, order_id: str) -> OrderRecord | None:
        """Fetch an order record, or None if it does not exist."""

    @abstractmethod
    def update_order(
        self,
        order_id: str,
        fields: dict[str, Any],
        clear: Iterable[str] = ()
    ) -> None:
        """Update the given fields and null out the `clear` fields."""

    @abstractmethod
    def create_line_item(self, order_id: str, fields: dict[str, Any]) -> str:
        """Insert a line item owned by `order_id` and return its new id."""

    @abstractmethod
    def update_line_item(self, line_item_id: str, fields: dict[str, Any]) -> None:
        """Update a line item in place."""

    @abstractmethod
    def delete_line_item(self, line_item_id: str) -> None:
        """Hard delete a line item."""

    @abstractmethod
    def list_line_items(self, order_id: str) -> list[LineItem]:
        """Line items of one order, ordered by position."""

    @abstractmethod
    def list_orders(self) -> list[OrderRecord]:
        """All order records, without line items."""

    def close(self) -> None:
        """Release any resources held by the store."""


def compact(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is absent (None)."""
    return {key: value for key, value in fields.items() if value is not None}
