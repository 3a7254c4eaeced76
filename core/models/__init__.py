"""Core domain models."""

from core.models.line_item import LineItem, LineItemDraft, PricedLineItem
from core.models.service_order import (
    OrderRecord,
    OrderStatus,
    ServiceOrder,
    ServiceOrderDraft,
    ServiceType,
    OPTIONAL_ORDER_FIELDS,
)

__all__ = [
    # LineItem
    "LineItem", "LineItemDraft", "PricedLineItem",
    # ServiceOrder
    "OrderRecord", "OrderStatus", "ServiceOrder", "ServiceOrderDraft", "ServiceType",
    "OPTIONAL_ORDER_FIELDS",
]
