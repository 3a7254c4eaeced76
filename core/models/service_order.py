"""Service order domain models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from core.models.line_item import LineItem, LineItemDraft
from core.money import MAX_AMOUNT, ZERO, format_money
from utils.timezone import assume_utc


class ServiceType(str, Enum):
    """Kind of repair job."""

    PUMP_REPAIR = "pump_repair"
    NOZZLE_RESTORATION = "nozzle_restoration"


# Codes used by the shop's original intake forms
_SERVICE_TYPE_ALIASES = {
    "conserto_bomba": ServiceType.PUMP_REPAIR,
    "restauracao_bico": ServiceType.NOZZLE_RESTORATION,
}


class OrderStatus(str, Enum):
    """Order lifecycle status. Always derived, never set directly."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAID = "paid"


# Fields an edit may clear
OPTIONAL_ORDER_FIELDS = (
    "customer_address",
    "service_start_date",
    "completion_date",
    "payment_date",
)


class ServiceOrderDraft(BaseModel):
    """Data submitted to create or edit a service order."""

    customer_name: str = Field(..., min_length=2, max_length=255)
    customer_phone: str = Field(..., min_length=10, max_length=50)
    customer_address: str | None = Field(None, max_length=500)
    service_description: str = Field(..., min_length=5, max_length=5000)
    service_type: ServiceType
    amount_paid: Decimal = Field(ZERO, ge=0, lt=MAX_AMOUNT)
    creation_date: datetime
    service_start_date: datetime | None = None
    completion_date: datetime | None = None
    payment_date: datetime | None = None
    line_items: list[LineItemDraft] = Field(default_factory=list)

    model_config = {"validate_assignment": True}

    @field_validator("customer_name", "customer_phone", "service_description", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("customer_address", mode="before")
    @classmethod
    def blank_address_is_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("service_type", mode="before")
    @classmethod
    def accept_legacy_service_codes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _SERVICE_TYPE_ALIASES.get(value, value)
        return value

    @field_validator("amount_paid", mode="before")
    @classmethod
    def blank_amount_paid_is_zero(cls, value: Any) -> Any:
        """Missing or blank means nothing paid; anything else must parse."""
        if value is None:
            return ZERO
        if isinstance(value, str):
            return value.strip() or ZERO
        return value

    @field_validator(
        "creation_date", "service_start_date", "completion_date", "payment_date",
        mode="after"
    )
    @classmethod
    def dates_in_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return assume_utc(value)


class OrderRecord(BaseModel):
    """Order row as stored, without its line items."""

    id: str
    customer_name: str
    customer_phone: str
    customer_address: str | None = None
    service_description: str
    service_type: ServiceType
    budget_amount: Decimal
    amount_paid: Decimal
    creation_date: datetime
    service_start_date: datetime | None = None
    completion_date: datetime | None = None
    payment_date: datetime | None = None
    status: OrderStatus

    model_config = {"from_attributes": True}


class ServiceOrder(OrderRecord):
    """Fully materialized order with its persisted line items."""

    line_items: list[LineItem] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: OrderRecord, line_items: list[LineItem]) -> "ServiceOrder":
        return cls(**record.model_dump(), line_items=line_items)

    @property
    def balance_due(self) -> Decimal:
        """Remaining amount to be paid."""
        return self.budget_amount - self.amount_paid

    @property
    def budget_display(self) -> str:
        return format_money(self.budget_amount)

    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID
