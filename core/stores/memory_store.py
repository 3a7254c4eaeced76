"""
In-process Store backed by dicts.

Used by tests, local development and embedding. Safe to share between
threads; every operation holds the store lock for its duration.
"""

import logging
import threading
from collections.abc import Iterable
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import StoreError
from core.models import LineItem, OrderRecord
from core.store import Store

logger = logging.getLogger(__name__)

_ORDER_COLUMNS = {
    "customer_name", "customer_phone", "customer_address",
    "service_description", "service_type", "budget_amount", "amount_paid",
    "creation_date", "service_start_date", "completion_date", "payment_date",
    "status",
}

_LINE_ITEM_COLUMNS = {
    "description", "quantity", "unit_price", "total_price", "position"
}


def _known(fields: dict[str, Any], columns: set[str], entity: str) -> dict[str, Any]:
    for field in fields:
        if field not in columns:
            logger.warning(f"Ignoring unknown field '{field}' on {entity}")
    return {k: v for k, v in fields.items() if k in columns}


class InMemoryStore(Store):
    """Dict-backed store. Rows are validated on write like a schema would."""

    def __init__(self):
        self._orders: dict[str, dict[str, Any]] = {}
        self._line_items: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()

    def create_order(self, fields: dict[str, Any]) -> str:
        order_id = str(uuid4())
        row = {"id": order_id, **_known(fields, _ORDER_COLUMNS, "order")}
        self._check_order(row, "create_order")
        with self._lock:
            self._orders[order_id] = row
        return order_id

    def get_order(self, order_id: str) -> OrderRecord | None:
        with self._lock:
            row = self._orders.get(order_id)
            if row is None:
                return None
            return OrderRecord.model_validate(row)

    def update_order(
        self,
        order_id: str,
        fields: dict[str, Any],
        clear: Iterable[str] = ()
    ) -> None:
        updates = _known(fields, _ORDER_COLUMNS, "order")
        cleared = _known(dict.fromkeys(clear), _ORDER_COLUMNS, "order")

        with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                raise StoreError("update_order", f"order {order_id} does not exist")

            row = {**current, **updates, **cleared}
            self._check_order(row, "update_order")
            self._orders[order_id] = row

    def create_line_item(self, order_id: str, fields: dict[str, Any]) -> str:
        line_item_id = str(uuid4())
        row = {
            "id": line_item_id,
            "order_id": order_id,
            **_known(fields, _LINE_ITEM_COLUMNS, "line_item"),
        }
        self._check_line_item(row, "create_line_item")

        with self._lock:
            if order_id not in self._orders:
                raise StoreError("create_line_item", f"order {order_id} does not exist")
            self._line_items[line_item_id] = row
        return line_item_id

    def update_line_item(self, line_item_id: str, fields: dict[str, Any]) -> None:
        updates = _known(fields, _LINE_ITEM_COLUMNS, "line_item")

        with self._lock:
            current = self._line_items.get(line_item_id)
            if current is None:
                raise StoreError("update_line_item", f"line item {line_item_id} does not exist")

            row = {**current, **updates}
            self._check_line_item(row, "update_line_item")
            self._line_items[line_item_id] = row

    def delete_line_item(self, line_item_id: str) -> None:
        with self._lock:
            if self._line_items.pop(line_item_id, None) is None:
                raise StoreError("delete_line_item", f"line item {line_item_id} does not exist")

    def list_line_items(self, order_id: str) -> list[LineItem]:
        with self._lock:
            rows = [row for row in self._line_items.values() if row["order_id"] == order_id]

        # dicts keep insertion order, so equal positions stay in creation order
        rows.sort(key=lambda row: row.get("position", 0))
        return [LineItem.model_validate(row) for row in rows]

    def list_orders(self) -> list[OrderRecord]:
        with self._lock:
            rows = list(self._orders.values())
        return [OrderRecord.model_validate(row) for row in rows]

    @staticmethod
    def _check_order(row: dict[str, Any], operation: str) -> None:
        try:
            OrderRecord.model_validate(row)
        except PydanticValidationError as e:
            raise StoreError(operation, f"invalid order row: {e}") from e

    @staticmethod
    def _check_line_item(row: dict[str, Any], operation: str) -> None:
        try:
            LineItem.model_validate(row)
        except PydanticValidationError as e:
            raise StoreError(operation, f"invalid line item row: {e}") from e
