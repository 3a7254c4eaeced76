"""Tests for core/intake.py - raw payload coercion and validation."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.exceptions import ValidationError
from core.intake import normalize_payload, parse_order_draft
from core.models import ServiceType


@pytest.fixture
def form_payload():
    """Payload shaped like the order form submits it."""
    return {
        "customerName": "João Pereira",
        "customerPhone": "21999998888",
        "customerAddress": "",
        "serviceDescription": "Restore injector nozzles",
        "serviceType": "restauracao_bico",
        "amountPaid": "80",
        "creationDate": "2024-05-01T12:00:00.000Z",
        "serviceStartDate": "",
        "completionDate": None,
        "budgetAmount": 12345,
        "status": "paid",
        "budgetItems": [
            {"id": "li-1", "description": "Nozzle", "quantity": "4", "unitPrice": "20", "totalPrice": 1},
        ],
    }


class TestParseOrderDraft:
    """Tests for parse_order_draft()."""

    def test_accepts_form_payload(self, form_payload):
        draft = parse_order_draft(form_payload)

        assert draft.customer_name == "João Pereira"
        assert draft.service_type == ServiceType.NOZZLE_RESTORATION
        assert draft.amount_paid == Decimal("80")
        assert draft.customer_address is None
        assert draft.service_start_date is None
        assert draft.creation_date == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert draft.line_items[0].id == "li-1"
        assert draft.line_items[0].unit_price == Decimal("20")

    def test_accepts_snake_case(self, form_payload):
        payload = normalize_payload(form_payload)

        draft = parse_order_draft(payload)

        assert draft.customer_phone == "21999998888"

    def test_missing_line_items_defaults_empty(self, form_payload):
        del form_payload["budgetItems"]

        assert parse_order_draft(form_payload).line_items == []

    def test_null_line_items_defaults_empty(self, form_payload):
        form_payload["budgetItems"] = None

        assert parse_order_draft(form_payload).line_items == []

    def test_bad_item_numbers_become_zero(self, form_payload):
        form_payload["budgetItems"] = [{"description": "Odd", "quantity": "lots", "unitPrice": None}]

        item = parse_order_draft(form_payload).line_items[0]

        assert item.quantity == Decimal("0")
        assert item.unit_price == Decimal("0")

    def test_naive_date_read_as_utc(self, form_payload):
        form_payload["creationDate"] = "2024-05-01"

        draft = parse_order_draft(form_payload)

        assert draft.creation_date.tzinfo == timezone.utc

    def test_missing_required_fields_are_listed(self, form_payload):
        del form_payload["customerName"]
        del form_payload["creationDate"]

        with pytest.raises(ValidationError) as exc_info:
            parse_order_draft(form_payload)

        assert set(exc_info.value.fields) == {"customer_name", "creation_date"}

    def test_short_phone_rejected(self, form_payload):
        form_payload["customerPhone"] = "12345"

        with pytest.raises(ValidationError) as exc_info:
            parse_order_draft(form_payload)

        assert exc_info.value.field == "customer_phone"

    def test_negative_amount_paid_rejected(self, form_payload):
        form_payload["amountPaid"] = "-1"

        with pytest.raises(ValidationError, match="amount_paid"):
            parse_order_draft(form_payload)

    def test_negative_unit_price_names_item(self, form_payload):
        form_payload["budgetItems"].append({"description": "Bad", "quantity": 1, "unitPrice": -3})

        with pytest.raises(ValidationError) as exc_info:
            parse_order_draft(form_payload)

        assert exc_info.value.fields == ["line_items.1.unit_price"]

    def test_empty_item_description_rejected(self, form_payload):
        form_payload["budgetItems"][0]["description"] = "   "

        with pytest.raises(ValidationError, match="line_items.0.description"):
            parse_order_draft(form_payload)

    def test_unknown_service_type_rejected(self, form_payload):
        form_payload["serviceType"] = "oil_change"

        with pytest.raises(ValidationError, match="service_type"):
            parse_order_draft(form_payload)

    def test_non_numeric_amount_paid_rejected(self, form_payload):
        form_payload["amountPaid"] = "abc"

        with pytest.raises(ValidationError) as exc_info:
            parse_order_draft(form_payload)

        assert exc_info.value.fields == ["amount_paid"]

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_amount_paid_is_zero(self, form_payload, value):
        form_payload["amountPaid"] = value

        assert parse_order_draft(form_payload).amount_paid == Decimal("0")

    def test_missing_amount_paid_is_zero(self, form_payload):
        del form_payload["amountPaid"]

        assert parse_order_draft(form_payload).amount_paid == Decimal("0")

    def test_out_of_range_amount_paid_rejected(self, form_payload):
        form_payload["amountPaid"] = "1e500000"

        with pytest.raises(ValidationError, match="amount_paid"):
            parse_order_draft(form_payload)

    def test_out_of_range_item_numbers_become_zero(self, form_payload):
        form_payload["budgetItems"] = [{"description": "Huge", "quantity": "1e500000", "unitPrice": "1e500000"}]

        item = parse_order_draft(form_payload).line_items[0]

        assert item.quantity == Decimal("0")
        assert item.unit_price == Decimal("0")

    def test_epoch_timestamp_string_accepted(self, form_payload):
        """Ten-character strings that are not calendar dates are left for pydantic."""
        form_payload["creationDate"] = "1714521600"

        draft = parse_order_draft(form_payload)

        assert draft.creation_date == datetime(2024, 5, 1, tzinfo=timezone.utc)

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError, match="payload"):
            parse_order_draft(["not", "an", "object"])


class TestNormalizePayload:

    def test_drops_derived_keys(self, form_payload):
        data = normalize_payload(form_payload)

        assert "budgetAmount" not in data
        assert "status" not in data

    def test_renames_item_keys(self, form_payload):
        data = normalize_payload(form_payload)

        assert data["line_items"][0]["unit_price"] == "20"

    def test_bare_date_gets_midnight(self, form_payload):
        form_payload["paymentDate"] = "2024-05-04"

        assert normalize_payload(form_payload)["payment_date"] == "2024-05-04T00:00:00"

    def test_ten_char_non_date_untouched(self, form_payload):
        form_payload["creationDate"] = "1714521600"

        assert normalize_payload(form_payload)["creation_date"] == "1714521600"
