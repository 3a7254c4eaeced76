"""API test fixtures - TestClient over an in-memory order store."""

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from core.config import OrdersConfig


@pytest.fixture
def app(store):
    """App sharing the test's InMemoryStore."""
    return create_app(OrdersConfig(), store=store)


@pytest.fixture
def client(app):
    """TestClient that returns 500 responses instead of raising."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def order_payload():
    """Order body the way the order form posts it."""
    return {
        "customerName": "Maria Souza",
        "customerPhone": "11987654321",
        "customerAddress": "Rua das Flores, 100",
        "serviceDescription": "Injection pump overhaul",
        "serviceType": "pump_repair",
        "amountPaid": "0",
        "creationDate": "2024-05-01T09:00:00Z",
        "serviceStartDate": "",
        "completionDate": "",
        "paymentDate": "",
        "budgetItems": [
            {"description": "Seal kit", "quantity": 2, "unitPrice": "50"},
            {"description": "Labor", "quantity": 1, "unitPrice": "30"},
        ],
    }
