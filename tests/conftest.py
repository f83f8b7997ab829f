"""Shared fixtures for checkout wizard tests."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from checkout_wizard.application.checkout_orchestrator import reset_session_repository
from checkout_wizard.application.step_service import reset_step_service
from checkout_wizard.domain.value_objects import AccountFields, PaymentFields, ShippingFields
from checkout_wizard.infrastructure.config import settings
from checkout_wizard.main import app


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Fresh services for every test, with no simulated latency."""
    monkeypatch.setattr(settings, "simulated_latency_enabled", False)
    reset_step_service()
    reset_session_repository()
    yield
    reset_step_service()
    reset_session_repository()


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def account_fields() -> AccountFields:
    return AccountFields(email="user@test.com", password="password123")


@pytest.fixture
def shipping_fields() -> ShippingFields:
    return ShippingFields(
        address_line1="Flat 2",
        street_name="High Street",
        postcode="SW1A 1AA",
        shipping_method="standard",
    )


@pytest.fixture
def payment_fields() -> PaymentFields:
    return PaymentFields(
        name_on_card="Jane Doe",
        card_number="4242424242424242",
        expiration_month="12",
        expiration_year="2030",
        cvc="123",
    )


@pytest.fixture
def account_payload() -> dict[str, str]:
    return {"email": "user@test.com", "password": "password123"}


@pytest.fixture
def shipping_payload() -> dict[str, str]:
    return {
        "addressLine1": "Flat 2",
        "streetName": "High Street",
        "postcode": "SW1A 1AA",
        "shippingMethod": "standard",
    }


@pytest.fixture
def payment_payload() -> dict[str, str]:
    return {
        "nameOnCard": "Jane Doe",
        "cardNumber": "4242424242424242",
        "expirationMonth": "12",
        "expirationYear": "2030",
        "cvc": "123",
    }
