"""
Boundary coercion for raw order payloads.

Form submissions arrive as loosely-typed dicts with camelCase keys, string
numbers and blank strings for unset dates. parse_order_draft normalizes them
into a ServiceOrderDraft or raises core.exceptions.ValidationError naming
every offending field. Nothing downstream sees a raw payload.
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from core.models import ServiceOrderDraft

logger = logging.getLogger(__name__)

_ORDER_KEYS = {
    "customerName": "customer_name",
    "customerPhone": "customer_phone",
    "customerAddress": "customer_address",
    "serviceDescription": "service_description",
    "serviceType": "service_type",
    "amountPaid": "amount_paid",
    "creationDate": "creation_date",
    "serviceStartDate": "service_start_date",
    "completionDate": "completion_date",
    "paymentDate": "payment_date",
    "budgetItems": "line_items",
    "lineItems": "line_items",
}

_ITEM_KEYS = {
    "unitPrice": "unit_price",
}

# Computed by the engine; a submitted value is dropped
_DERIVED_KEYS = {"id", "status", "budget_amount", "budgetAmount"}

_DATE_FIELDS = ("creation_date", "service_start_date", "completion_date", "payment_date")


def _rename(payload: Mapping[str, Any], keys: dict[str, str]) -> dict[str, Any]:
    return {keys.get(key, key): value for key, value in payload.items()}


def _normalize_date(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    # bare YYYY-MM-DD from date pickers
    if len(text) == 10:
        try:
            date.fromisoformat(text)
        except ValueError:
            return text
        return f"{text}T00:00:00"
    return text


def _normalize_item(item: Any) -> Any:
    if isinstance(item, Mapping):
        return _rename(item, _ITEM_KEYS)
    return item


def normalize_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Rename camelCase keys, drop derived keys, blank dates to None."""
    data = {
        key: value
        for key, value in _rename(payload, _ORDER_KEYS).items()
        if key not in _DERIVED_KEYS
    }

    for field in _DATE_FIELDS:
        if field in data:
            data[field] = _normalize_date(data[field])

    items = data.get("line_items")
    if items is None:
        data.pop("line_items", None)
    elif isinstance(items, list):
        data["line_items"] = [_normalize_item(item) for item in items]

    return data


def from_pydantic(error: PydanticValidationError) -> ValidationError:
    """Convert a pydantic error into a ValidationError listing field paths."""
    fields = []
    messages = []
    for detail in error.errors():
        path = ".".join(str(part) for part in detail["loc"]) or "payload"
        fields.append(path)
        messages.append(f"{path}: {detail['msg']}")

    return ValidationError(fields, "; ".join(messages))


def parse_order_draft(payload: Mapping[str, Any]) -> ServiceOrderDraft:
    """
    Validate a raw order payload.

    Args:
        payload: Dict from a form or API body (camelCase or snake_case)

    Returns:
        Typed ServiceOrderDraft

    Raises:
        ValidationError: If required fields are missing or values are out of range
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("payload", "expected an object")

    try:
        return ServiceOrderDraft.model_validate(normalize_payload(payload))
    except PydanticValidationError as e:
        logger.info(f"Rejected order payload: {e.error_count()} invalid field(s)")
        raise from_pydantic(e) from e
