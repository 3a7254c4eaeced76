"""
PostgreSQL-backed Store.

Each Store call is a single statement committed on its own. Database errors
surface as StoreError; nothing is retried here.
"""

import logging
from collections.abc import Iterable
from contextlib import contextmanager
from typing import Any
from uuid import uuid4

import psycopg2

from clients.postgres_client import PostgresClient
from core.exceptions import StoreError
from core.models import LineItem, OrderRecord
from core.store import Store

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS service_orders (
    id TEXT PRIMARY KEY,
    customer_name TEXT NOT NULL,
    customer_phone TEXT NOT NULL,
    customer_address TEXT,
    service_description TEXT NOT NULL,
    service_type TEXT NOT NULL,
    budget_amount NUMERIC NOT NULL DEFAULT 0,
    amount_paid NUMERIC NOT NULL DEFAULT 0,
    creation_date TIMESTAMPTZ NOT NULL,
    service_start_date TIMESTAMPTZ,
    completion_date TIMESTAMPTZ,
    payment_date TIMESTAMPTZ,
    status TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS line_items (
    id TEXT PRIMARY KEY,
    order_id TEXT NOT NULL REFERENCES service_orders(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    quantity NUMERIC NOT NULL,
    unit_price NUMERIC NOT NULL,
    total_price NUMERIC NOT NULL,
    position INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS line_items_order_id_idx ON line_items (order_id);
"""

_ORDER_COLUMNS = (
    "customer_name", "customer_phone", "customer_address",
    "service_description", "service_type", "budget_amount", "amount_paid",
    "creation_date", "service_start_date", "completion_date", "payment_date",
    "status",
)

_LINE_ITEM_COLUMNS = (
    "description", "quantity", "unit_price", "total_price", "position"
)


def _known(fields: dict[str, Any], columns: tuple[str, ...], entity: str) -> dict[str, Any]:
    for field in fields:
        if field not in columns:
            logger.warning(f"Ignoring unknown field '{field}' on {entity}")
    return {k: v for k, v in fields.items() if k in columns}


@contextmanager
def _store_errors(operation: str):
    """Translate database failures into StoreError."""
    try:
        yield
    except psycopg2.Error as e:
        logger.error(f"Store operation {operation} failed: {e}")
        raise StoreError(operation, str(e)) from e


class PostgresStore(Store):
    """Store implementation over a PostgresClient."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def ensure_schema(self) -> None:
        """Create tables if they don't exist."""
        with _store_errors("ensure_schema"):
            self.postgres.execute(SCHEMA_SQL)

    def create_order(self, fields: dict[str, Any]) -> str:
        order_id = str(uuid4())
        values = _known(fields, _ORDER_COLUMNS, "order")
        columns = ["id", *values.keys()]

        with _store_errors("create_order"):
            self.postgres.execute(
                f"""
                INSERT INTO service_orders ({', '.join(columns)})
                VALUES ({', '.join(['%s'] * len(columns))})
                """,
                (order_id, *values.values())
            )
        return order_id

    def get_order(self, order_id: str) -> OrderRecord | None:
        with _store_errors("get_order"):
            row = self.postgres.execute_single(
                "SELECT * FROM service_orders WHERE id = %s",
                (order_id,)
            )

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

        set_parts = []
        params = []
        for field, value in updates.items():
            set_parts.append(f"{field} = %s")
            params.append(value)
        for field in cleared:
            set_parts.append(f"{field} = NULL")

        if not set_parts:
            return
        params.append(order_id)

        with _store_errors("update_order"):
            count = self.postgres.execute_rowcount(
                f"UPDATE service_orders SET {', '.join(set_parts)} WHERE id = %s",
                tuple(params)
            )
        if count == 0:
            raise StoreError("update_order", f"order {order_id} does not exist")

    def create_line_item(self, order_id: str, fields: dict[str, Any]) -> str:
        line_item_id = str(uuid4())
        values = _known(fields, _LINE_ITEM_COLUMNS, "line_item")
        columns = ["id", "order_id", *values.keys()]

        with _store_errors("create_line_item"):
            self.postgres.execute(
                f"""
                INSERT INTO line_items ({', '.join(columns)})
                VALUES ({', '.join(['%s'] * len(columns))})
                """,
                (line_item_id, order_id, *values.values())
            )
        return line_item_id

    def update_line_item(self, line_item_id: str, fields: dict[str, Any]) -> None:
        updates = _known(fields, _LINE_ITEM_COLUMNS, "line_item")
        if not updates:
            return

        set_parts = [f"{field} = %s" for field in updates]
        params = (*updates.values(), line_item_id)

        with _store_errors("update_line_item"):
            count = self.postgres.execute_rowcount(
                f"UPDATE line_items SET {', '.join(set_parts)} WHERE id = %s",
                params
            )
        if count == 0:
            raise StoreError("update_line_item", f"line item {line_item_id} does not exist")

    def delete_line_item(self, line_item_id: str) -> None:
        with _store_errors("delete_line_item"):
            count = self.postgres.execute_rowcount(
                "DELETE FROM line_items WHERE id = %s",
                (line_item_id,)
            )
        if count == 0:
            raise StoreError("delete_line_item", f"line item {line_item_id} does not exist")

    def list_line_items(self, order_id: str) -> list[LineItem]:
        with _store_errors("list_line_items"):
            rows = self.postgres.execute(
                """
                SELECT * FROM line_items
                WHERE order_id = %s
                ORDER BY position ASC, id ASC
                """,
                (order_id,)
            )
        return [LineItem.model_validate(row) for row in rows]

    def list_orders(self) -> list[OrderRecord]:
        with _store_errors("list_orders"):
            rows = self.postgres.execute(
                "SELECT * FROM service_orders ORDER BY creation_date DESC"
            )
        return [OrderRecord.model_validate(row) for row in rows]

    def close(self) -> None:
        self.postgres.close()
