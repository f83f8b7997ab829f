"""Tests for checkout step API endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient


class TestAccountEndpoint:
    """Tests for POST /api/checkout/account."""

    def test_account_accepted(self, client: TestClient, account_payload: dict) -> None:
        response = client.post("/api/checkout/account", json=account_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Account verified successfully"
        assert data["accountId"].startswith("acc_")

    def test_missing_fields(self, client: TestClient) -> None:
        response = client.post("/api/checkout/account", json={"email": "user@test.com"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Email and password are required"
        assert data["errorCode"] == "STEP_REJECTED"

    def test_empty_object(self, client: TestClient) -> None:
        """An empty form is a rejection, not a malformed body."""
        response = client.post("/api/checkout/account", json={})

        assert response.status_code == 400
        assert response.json()["errorCode"] == "STEP_REJECTED"

    def test_registered_email(self, client: TestClient) -> None:
        response = client.post(
            "/api/checkout/account",
            json={"email": "error@test.com", "password": "password123"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "This email is already registered"

    def test_body_not_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/checkout/account",
            content="email=user@test.com",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["errorCode"] == "MALFORMED_REQUEST"
        assert data["error"] == "Malformed request body"

    @pytest.mark.parametrize(
        "body",
        [
            ["user@test.com", "password123"],
            {"email": 42, "password": "password123"},
            {"email": "user@test.com", "password": ["password123"]},
        ],
    )
    def test_wrong_shape(self, client: TestClient, body: object) -> None:
        response = client.post("/api/checkout/account", json=body)

        assert response.status_code == 400
        assert response.json()["errorCode"] == "MALFORMED_REQUEST"

    def test_response_carries_request_id(self, client: TestClient) -> None:
        response = client.post(
            "/api/checkout/account",
            json={},
            headers={"X-Request-ID": "req-account-1"},
        )

        assert response.json()["requestId"] == "req-account-1"
        assert response.headers["X-Request-ID"] == "req-account-1"


class TestShippingEndpoint:
    """Tests for POST /api/checkout/shipping."""

    def test_shipping_accepted(self, client: TestClient, shipping_payload: dict) -> None:
        response = client.post("/api/checkout/shipping", json=shipping_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Shipping address verified"
        assert data["shippingId"].startswith("ship_")

    def test_missing_fields(self, client: TestClient, shipping_payload: dict) -> None:
        del shipping_payload["streetName"]
        response = client.post("/api/checkout/shipping", json=shipping_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "All shipping fields are required"

    def test_unknown_method(self, client: TestClient, shipping_payload: dict) -> None:
        shipping_payload["shippingMethod"] = "teleport"
        response = client.post("/api/checkout/shipping", json=shipping_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid shipping method"

    def test_undeliverable_postcode(self, client: TestClient, shipping_payload: dict) -> None:
        shipping_payload["postcode"] = "00000"
        response = client.post("/api/checkout/shipping", json=shipping_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid postcode"


class TestPaymentEndpoint:
    """Tests for POST /api/checkout/payment."""

    def test_payment_accepted(self, client: TestClient, payment_payload: dict) -> None:
        response = client.post("/api/checkout/payment", json=payment_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Payment processed successfully"
        assert data["paymentId"].startswith("pay_")

    @pytest.mark.parametrize(
        "field_name,value,error",
        [
            ("cardNumber", "1234", "Invalid card number"),
            ("cvc", "12", "Invalid CVC"),
            ("expirationMonth", "13", "Invalid month"),
            ("expirationYear", "30", "Invalid year"),
            ("cardNumber", "4000000000000002", "Card declined"),
            ("nameOnCard", "", "All payment fields are required"),
        ],
    )
    def test_payment_rejected(
        self,
        client: TestClient,
        payment_payload: dict,
        field_name: str,
        value: str,
        error: str,
    ) -> None:
        payment_payload[field_name] = value
        response = client.post("/api/checkout/payment", json=payment_payload)

        assert response.status_code == 400
        assert response.json()["error"] == error


class TestCompleteEndpoint:
    """Tests for POST /api/checkout/complete."""

    def test_complete_order(self, client: TestClient) -> None:
        before = datetime.now(timezone.utc)
        response = client.post(
            "/api/checkout/complete",
            json={"accountId": "acc_1", "shippingId": "ship_2", "paymentId": "pay_3"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Order completed successfully"
        assert data["orderId"].startswith("ORD-")
        assert data["total"] == 124.99
        assert data["currency"] == "USD"

        delivery = datetime.fromisoformat(data["estimatedDelivery"])
        assert before + timedelta(days=7) <= delivery
        assert delivery <= datetime.now(timezone.utc) + timedelta(days=7)

    def test_missing_ids(self, client: TestClient) -> None:
        response = client.post(
            "/api/checkout/complete",
            json={"accountId": "acc_1", "shippingId": "ship_2"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required order information"


class TestSummaryEndpoint:
    """Tests for GET /api/checkout/summary."""

    def test_summary(self, client: TestClient) -> None:
        response = client.get("/api/checkout/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["subtotal"] == 99.99
        assert data["tax"] == 15.0
        assert data["shipping"] == 10.0
        assert data["total"] == 124.99
        assert data["currency"] == "USD"
        assert [item["name"] for item in data["items"]] == [
            "Headsets",
            "Audio Cable",
            "Protective Case",
        ]
        assert data["items"][0] == {"id": "1", "name": "Headsets", "price": 99.99, "quantity": 1}
        assert "discount" not in data

    def test_summary_is_idempotent(self, client: TestClient) -> None:
        first = client.get("/api/checkout/summary").json()
        client.get("/api/checkout/summary", params={"discountCode": "SAVE10"})
        second = client.get("/api/checkout/summary").json()
        assert first == second

    def test_summary_with_discount_code(self, client: TestClient) -> None:
        response = client.get("/api/checkout/summary", params={"discountCode": "SAVE10"})

        data = response.json()
        assert data["discountCode"] == "SAVE10"
        assert data["discount"] == 10.0
        assert data["discountedTotal"] == 114.99
        assert data["total"] == 124.99
