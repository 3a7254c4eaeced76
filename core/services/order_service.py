"""
Service order lifecycle and budget reconciliation.

save() prices the submitted line items, derives status from the draft's
dates and payment, upserts the order record and reconciles the persisted
line-item set to match the submission exactly. The returned order is read
back from the store, so its budget always equals the persisted item totals.

Nothing is retried or rolled back. A StoreError part way through a save
leaves whatever was already written; callers re-fetch to see actual state.
Two concurrent saves of the same order may interleave their item writes.
"""

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any

from core.budget import price, sum_totals
from core.exceptions import NotFound, StoreError, ValidationError
from core.intake import parse_order_draft
from core.lifecycle import derive_draft_status, derive_status
from core.models import (
    OPTIONAL_ORDER_FIELDS,
    OrderRecord,
    OrderStatus,
    PricedLineItem,
    ServiceOrder,
    ServiceOrderDraft,
)
from core.reconcile import plan_line_items
from core.store import Store, compact

logger = logging.getLogger(__name__)

# Status filter matching orders not yet completed
UNCOMPLETED = "uncompleted"
ALL_STATUSES = "all"

_SORT_KEYS = {
    "creation_date": lambda order: order.creation_date,
    "customer_name": lambda order: order.customer_name.casefold(),
    "budget_amount": lambda order: order.budget_amount,
    "status": lambda order: order.status.value,
}


class OrderService:
    """Service for service order operations."""

    def __init__(self, store: Store, list_workers: int = 8):
        self.store = store
        self.list_workers = list_workers

    def save(
        self,
        draft: ServiceOrderDraft | Mapping[str, Any],
        existing_id: str | None = None
    ) -> ServiceOrder:
        """
        Create or edit a service order with its full line-item set.

        Args:
            draft: Typed draft, or a raw payload to run through intake
            existing_id: Order to edit; None creates a new order

        Returns:
            The persisted order with read-back line items, budget and status

        Raises:
            ValidationError: If the draft violates a field constraint
            NotFound: If existing_id does not reference a stored order
            StoreError: If any store call fails (state may be partial)
        """
        if not isinstance(draft, ServiceOrderDraft):
            draft = parse_order_draft(draft)

        budget = price(draft.line_items)
        status = derive_draft_status(draft, budget.total)
        fields = self._order_fields(draft, budget.total, status)

        if existing_id is not None:
            if self.store.get_order(existing_id) is None:
                raise NotFound(existing_id)

            cleared = [name for name in OPTIONAL_ORDER_FIELDS if getattr(draft, name) is None]
            self.store.update_order(existing_id, fields, clear=cleared)
            order_id = existing_id
            logger.info(f"Updated service order {order_id} (status={status.value})")
        else:
            order_id = self.store.create_order(fields)
            logger.info(f"Created service order {order_id} (status={status.value})")

        try:
            self._reconcile_line_items(order_id, budget.items)
        except StoreError:
            logger.error(
                f"Line item reconciliation failed for order {order_id}; "
                "persisted state may be partial"
            )
            raise

        return self._read_back(order_id)

    def get_by_id(self, order_id: str) -> ServiceOrder | None:
        """
        Get an order with its line items.

        Returns:
            ServiceOrder if found, None otherwise.
        """
        record = self.store.get_order(order_id)
        if record is None:
            return None
        return ServiceOrder.from_record(record, self.store.list_line_items(order_id))

    def list_all(self) -> list[ServiceOrder]:
        """
        List every order enriched with its line items.

        Items are fetched in parallel per order. The result is not a
        consistent snapshot if a save is in flight.
        """
        records = self.store.list_orders()
        if not records:
            return []

        workers = max(1, min(self.list_workers, len(records)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            item_lists = list(pool.map(lambda r: self.store.list_line_items(r.id), records))

        return [
            ServiceOrder.from_record(record, items)
            for record, items in zip(records, item_lists)
        ]

    def search(
        self,
        term: str | None = None,
        status: OrderStatus | str | None = None,
        sort_by: str = "creation_date",
        descending: bool = True
    ) -> list[ServiceOrder]:
        """
        Filter and sort orders the way the order list shows them.

        Args:
            term: Case-insensitive match on customer name, service
                description or id; literal match on phone
            status: An OrderStatus, "uncompleted" (pending or in progress),
                or "all"/None for no filter
            sort_by: creation_date, customer_name, budget_amount or status
            descending: Sort direction

        Raises:
            ValidationError: If status or sort_by is not recognized
        """
        allowed = self._status_filter(status)
        key = _SORT_KEYS.get(sort_by)
        if key is None:
            raise ValidationError(
                "sort_by",
                f"must be one of {', '.join(sorted(_SORT_KEYS))}"
            )

        orders = [
            order for order in self.list_all()
            if (allowed is None or order.status in allowed) and _matches(order, term)
        ]
        return sorted(orders, key=key, reverse=descending)

    def _order_fields(
        self,
        draft: ServiceOrderDraft,
        budget_amount: Decimal,
        status: OrderStatus
    ) -> dict[str, Any]:
        fields = draft.model_dump(exclude={"line_items"})
        fields["budget_amount"] = budget_amount
        fields["status"] = status
        return compact(fields)

    def _reconcile_line_items(self, order_id: str, items: list[PricedLineItem]) -> None:
        existing = self.store.list_line_items(order_id)
        plan = plan_line_items(existing, items)

        for line_item_id in plan.to_delete:
            self.store.delete_line_item(line_item_id)
        for update in plan.to_update:
            self.store.update_line_item(update.line_item_id, update.fields)
        for fields in plan.to_create:
            self.store.create_line_item(order_id, fields)

        logger.debug(
            f"Reconciled line items for order {order_id}: "
            f"{len(plan.to_create)} created, {len(plan.to_update)} updated, "
            f"{len(plan.to_delete)} deleted"
        )

    def _read_back(self, order_id: str) -> ServiceOrder:
        record = self.store.get_order(order_id)
        if record is None:
            raise StoreError("get_order", f"order {order_id} missing after write")

        items = self.store.list_line_items(order_id)
        persisted_budget = sum_totals(item.total_price for item in items)

        if persisted_budget != record.budget_amount:
            logger.warning(
                f"Order {order_id} budget {record.budget_amount} does not match "
                f"persisted items {persisted_budget}; correcting"
            )
            record = self._correct_budget(record, persisted_budget)

        return ServiceOrder.from_record(record, items)

    def _correct_budget(self, record: OrderRecord, budget_amount: Decimal) -> OrderRecord:
        status = derive_status(
            payment_date=record.payment_date,
            amount_paid=record.amount_paid,
            budget_amount=budget_amount,
            completion_date=record.completion_date,
            service_start_date=record.service_start_date,
        )
        self.store.update_order(record.id, {"budget_amount": budget_amount, "status": status})
        return record.model_copy(update={"budget_amount": budget_amount, "status": status})

    @staticmethod
    def _status_filter(status: OrderStatus | str | None) -> set[OrderStatus] | None:
        if status is None or status == ALL_STATUSES:
            return None
        if status == UNCOMPLETED:
            return {OrderStatus.PENDING, OrderStatus.IN_PROGRESS}
        try:
            return {OrderStatus(status)}
        except ValueError:
            valid = [s.value for s in OrderStatus] + [UNCOMPLETED, ALL_STATUSES]
            raise ValidationError("status", f"must be one of {', '.join(valid)}")


def _matches(order: ServiceOrder, term: str | None) -> bool:
    if not term:
        return True
    needle = term.casefold()
    return (
        needle in order.customer_name.casefold()
        or term in order.customer_phone
        or needle in order.service_description.casefold()
        or needle in order.id.casefold()
    )
