"""Line item domain models.

Quantities and prices are Decimal in full precision. total_price is always
derived from quantity * unit_price; a caller-supplied total is never trusted.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from core.money import ZERO, coerce_amount, format_money


class LineItemDraft(BaseModel):
    """A line item as submitted with an order."""

    id: str | None = Field(None, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(ZERO, ge=0)
    unit_price: Decimal = Field(ZERO, ge=0)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def coerce_numeric(cls, value: Any) -> Decimal:
        """Missing or non-numeric amounts are tolerated as 0."""
        return coerce_amount(value)

    @field_validator("id", mode="before")
    @classmethod
    def blank_id_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PricedLineItem(BaseModel):
    """A draft line item with its computed total."""

    id: str | None
    description: str
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal

    def to_fields(self, position: int) -> dict[str, Any]:
        """Store payload for this item (never includes the id)."""
        return {
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
            "position": position,
        }


class LineItem(BaseModel):
    """Full line item entity as stored."""

    id: str
    order_id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal
    position: int = 0

    model_config = {"from_attributes": True}

    @property
    def total_price_display(self) -> str:
        """Total rounded to cents for display."""
        return format_money(self.total_price)
