"""Shared test fixtures for the service order test suite."""

import os
from datetime import datetime, timezone

import pytest

from core.models import ServiceOrderDraft, ServiceType
from core.services.order_service import OrderService
from core.stores.memory_store import InMemoryStore


# =============================================================================
# TEST DATA CONSTANTS
# =============================================================================

CREATED_AT = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

# Environment variable enabling the PostgreSQL store tests
TEST_DATABASE_URL_ENV = "SHOP_ORDERS_TEST_DATABASE_URL"


def make_draft(**overrides) -> ServiceOrderDraft:
    """Valid draft with sensible defaults; override any field."""
    data = {
        "customer_name": "Maria Souza",
        "customer_phone": "11987654321",
        "customer_address": "Rua das Flores, 100",
        "service_description": "Injection pump overhaul",
        "service_type": ServiceType.PUMP_REPAIR,
        "amount_paid": 0,
        "creation_date": CREATED_AT,
        "line_items": [
            {"description": "Seal kit", "quantity": 2, "unit_price": 50},
            {"description": "Labor", "quantity": 1, "unit_price": 30},
        ],
    }
    data.update(overrides)
    return ServiceOrderDraft(**data)


@pytest.fixture
def draft_factory():
    """Factory building valid ServiceOrderDrafts."""
    return make_draft


# =============================================================================
# STORE & SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def store():
    """Fresh in-memory store per test."""
    return InMemoryStore()


@pytest.fixture
def order_service(store):
    """OrderService over the in-memory store."""
    return OrderService(store, list_workers=4)


@pytest.fixture(scope="session")
def test_database_url():
    """PostgreSQL DSN for store integration tests; skips when unset."""
    url = os.getenv(TEST_DATABASE_URL_ENV)
    if not url:
        pytest.skip(f"{TEST_DATABASE_URL_ENV} not set")
    return url
