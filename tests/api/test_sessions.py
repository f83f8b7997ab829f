"""Tests for checkout session API endpoints."""

import pytest
from fastapi.testclient import TestClient

from checkout_wizard.application.checkout_orchestrator import get_session_repository


@pytest.fixture
def session_id(client: TestClient) -> str:
    response = client.post("/api/sessions")
    return response.json()["id"]


@pytest.fixture
def payment_session_id(
    client: TestClient,
    session_id: str,
    account_payload: dict,
    shipping_payload: dict,
) -> str:
    client.post(f"/api/sessions/{session_id}/account", json=account_payload)
    client.post(f"/api/sessions/{session_id}/shipping", json=shipping_payload)
    return session_id


class TestCreateSession:
    """Tests for POST /api/sessions."""

    def test_create_session(self, client: TestClient) -> None:
        response = client.post("/api/sessions")

        assert response.status_code == 201
        data = response.json()
        assert data["currentStep"] == "account"
        assert data["stepIndex"] == 0
        assert data["steps"] == ["Account", "Shipping", "Payment"]
        assert data["lastError"] is None
        assert data["isSubmitting"] is False
        assert data["orderId"] is None

    def test_get_session(self, client: TestClient, session_id: str) -> None:
        response = client.get(f"/api/sessions/{session_id}")

        assert response.status_code == 200
        assert response.json()["id"] == session_id

    def test_unknown_session(self, client: TestClient) -> None:
        response = client.get("/api/sessions/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["errorCode"] == "SESSION_NOT_FOUND"


class TestSessionSteps:
    """Tests for submitting steps through a session."""

    def test_account_accepted(
        self, client: TestClient, session_id: str, account_payload: dict
    ) -> None:
        response = client.post(f"/api/sessions/{session_id}/account", json=account_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is True
        assert data["error"] is None
        assert data["identifier"].startswith("acc_")

        session = data["session"]
        assert session["currentStep"] == "shipping"
        assert session["stepIndex"] == 1
        assert session["accountId"] == data["identifier"]
        assert session["accountData"] == {"email": "user@test.com"}

    def test_account_rejected(self, client: TestClient, session_id: str) -> None:
        """A rejection is reported in the body with a 200."""
        response = client.post(
            f"/api/sessions/{session_id}/account",
            json={"email": "nope", "password": "password123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is False
        assert data["error"] == "Invalid email format"
        assert data["session"]["currentStep"] == "account"
        assert data["session"]["lastError"] == "Invalid email format"
        assert data["session"]["accountData"] is None

    def test_wrong_step(self, client: TestClient, session_id: str, shipping_payload: dict) -> None:
        response = client.post(f"/api/sessions/{session_id}/shipping", json=shipping_payload)

        assert response.status_code == 409
        data = response.json()
        assert data["errorCode"] == "INVALID_STEP_TRANSITION"
        assert data["details"]["current_step"] == "account"

    def test_malformed_body(self, client: TestClient, session_id: str) -> None:
        response = client.post(f"/api/sessions/{session_id}/account", json={"email": 1})

        assert response.status_code == 400
        assert response.json()["errorCode"] == "MALFORMED_REQUEST"

    def test_full_checkout(
        self, client: TestClient, payment_session_id: str, payment_payload: dict
    ) -> None:
        response = client.post(
            f"/api/sessions/{payment_session_id}/payment", json=payment_payload
        )

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is True

        session = data["session"]
        assert session["currentStep"] == "complete"
        assert session["orderId"].startswith("ORD-")
        assert session["orderId"] == data["identifier"]
        assert session["paymentId"].startswith("pay_")
        assert session["confirmation"]["total"] == 124.99
        assert session["confirmation"]["message"] == "Order completed successfully"

    def test_payment_data_is_masked(
        self, client: TestClient, payment_session_id: str, payment_payload: dict
    ) -> None:
        response = client.post(
            f"/api/sessions/{payment_session_id}/payment", json=payment_payload
        )

        payment_data = response.json()["session"]["paymentData"]
        assert payment_data["cardNumber"] == "**** 4242"
        assert "cvc" not in payment_data
        assert "4242424242424242" not in response.text
        assert "password123" not in response.text

    def test_declined_card(
        self, client: TestClient, payment_session_id: str, payment_payload: dict
    ) -> None:
        payment_payload["cardNumber"] = "4000000000000002"
        response = client.post(
            f"/api/sessions/{payment_session_id}/payment", json=payment_payload
        )

        data = response.json()
        assert data["accepted"] is False
        assert data["error"] == "Card declined"
        assert data["session"]["currentStep"] == "payment"
        assert data["session"]["paymentId"] is None

    def test_completed_session_is_released(
        self, client: TestClient, payment_session_id: str, payment_payload: dict
    ) -> None:
        """The payment response is the last view of a completed session."""
        client.post(f"/api/sessions/{payment_session_id}/payment", json=payment_payload)

        response = client.get(f"/api/sessions/{payment_session_id}")
        assert response.status_code == 404

        response = client.post(
            f"/api/sessions/{payment_session_id}/payment", json=payment_payload
        )
        assert response.status_code == 404

        response = client.post(f"/api/sessions/{payment_session_id}/back")
        assert response.status_code == 404

    def test_completed_checkouts_do_not_accumulate(
        self,
        client: TestClient,
        account_payload: dict,
        shipping_payload: dict,
        payment_payload: dict,
    ) -> None:
        for _ in range(20):
            session_id = client.post("/api/sessions").json()["id"]
            client.post(f"/api/sessions/{session_id}/account", json=account_payload)
            client.post(f"/api/sessions/{session_id}/shipping", json=shipping_payload)
            response = client.post(
                f"/api/sessions/{session_id}/payment", json=payment_payload
            )
            assert response.json()["session"]["currentStep"] == "complete"

        assert get_session_repository().count() == 0


class TestBackNavigation:
    """Tests for POST /api/sessions/{id}/back."""

    def test_back_from_payment(self, client: TestClient, payment_session_id: str) -> None:
        response = client.post(f"/api/sessions/{payment_session_id}/back")

        assert response.status_code == 200
        data = response.json()
        assert data["currentStep"] == "shipping"
        assert data["shippingData"]["postcode"] == "SW1A 1AA"

    def test_back_clears_error(
        self, client: TestClient, payment_session_id: str, payment_payload: dict
    ) -> None:
        payment_payload["cvc"] = "1"
        client.post(f"/api/sessions/{payment_session_id}/payment", json=payment_payload)

        response = client.post(f"/api/sessions/{payment_session_id}/back")
        assert response.json()["lastError"] is None

    def test_back_from_account(self, client: TestClient, session_id: str) -> None:
        response = client.post(f"/api/sessions/{session_id}/back")

        assert response.status_code == 409
        assert response.json()["errorCode"] == "INVALID_STEP_TRANSITION"


class TestAbandonSession:
    """Tests for DELETE /api/sessions/{id}."""

    def test_abandon(self, client: TestClient, session_id: str) -> None:
        response = client.delete(f"/api/sessions/{session_id}")
        assert response.status_code == 204

        response = client.get(f"/api/sessions/{session_id}")
        assert response.status_code == 404

    def test_abandon_unknown(self, client: TestClient) -> None:
        response = client.delete("/api/sessions/missing")
        assert response.status_code == 404
