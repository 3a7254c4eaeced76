"""
Service order status derivation.

Status is a projection of the order's dates and payment, recomputed on every
save. There is no stored transition history: editing a date out can move an
order back to an earlier status.

Precedence (first match wins):
    PAID         payment date set and amount paid covers the budget
    COMPLETED    completion date set
    IN_PROGRESS  service start date set
    PENDING      otherwise
"""

from datetime import datetime
from decimal import Decimal

from core.models import OrderStatus, ServiceOrderDraft


def derive_status(
    payment_date: datetime | None,
    amount_paid: Decimal,
    budget_amount: Decimal,
    completion_date: datetime | None,
    service_start_date: datetime | None,
) -> OrderStatus:
    """Classify an order from its current field values."""
    if payment_date is not None and amount_paid >= budget_amount:
        return OrderStatus.PAID
    if completion_date is not None:
        return OrderStatus.COMPLETED
    if service_start_date is not None:
        return OrderStatus.IN_PROGRESS
    return OrderStatus.PENDING


def derive_draft_status(draft: ServiceOrderDraft, budget_amount: Decimal) -> OrderStatus:
    """Status of a draft against a freshly computed budget."""
    return derive_status(
        payment_date=draft.payment_date,
        amount_paid=draft.amount_paid,
        budget_amount=budget_amount,
        completion_date=draft.completion_date,
        service_start_date=draft.service_start_date,
    )
