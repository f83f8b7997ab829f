"""HTTP client for the checkout step endpoints.

Talks to the ``/api/checkout`` endpoints and turns their responses back
into domain results. Rejections come back as data; anything else that
goes wrong (connection errors, timeouts, server errors, bodies that
cannot be read) raises StepTransportError with a generic message for
the operation.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import structlog

from checkout_wizard.domain.value_objects import (
    AccountFields,
    CompletionRequest,
    CompletionResult,
    OrderConfirmation,
    OrderLineItem,
    OrderSummary,
    PaymentFields,
    ShippingFields,
    StepSubmissionResult,
)

logger = structlog.get_logger()

MALFORMED_REQUEST = "MALFORMED_REQUEST"

# Message shown when an operation fails for any reason other than a rejection.
TRANSPORT_FAILURE_MESSAGES: dict[str, str] = {
    "account": "Failed to validate account",
    "shipping": "Failed to validate shipping",
    "payment": "Failed to process payment",
    "complete": "Failed to complete order",
    "summary": "Failed to fetch order summary",
}


class StepTransportError(Exception):
    """A step call failed before the server could accept or reject it."""

    def __init__(
        self,
        operation: str,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize transport error.

        Args:
            operation: Operation that failed (account, shipping, ...).
            detail: What actually went wrong, for logs.
            status_code: HTTP status, when a response was received.
        """
        self.operation = operation
        self.message = TRANSPORT_FAILURE_MESSAGES.get(operation, "Request failed")
        self.detail = detail
        self.status_code = status_code
        super().__init__(self.message)


def account_payload(fields: AccountFields) -> dict[str, Any]:
    return {"email": fields.email, "password": fields.password}


def shipping_payload(fields: ShippingFields) -> dict[str, Any]:
    return {
        "addressLine1": fields.address_line1,
        "streetName": fields.street_name,
        "postcode": fields.postcode,
        "shippingMethod": fields.shipping_method,
    }


def payment_payload(fields: PaymentFields) -> dict[str, Any]:
    return {
        "nameOnCard": fields.name_on_card,
        "cardNumber": fields.card_number,
        "expirationMonth": fields.expiration_month,
        "expirationYear": fields.expiration_year,
        "cvc": fields.cvc,
    }


def completion_payload(request: CompletionRequest) -> dict[str, Any]:
    return {
        "accountId": request.account_id,
        "shippingId": request.shipping_id,
        "paymentId": request.payment_id,
    }


class CheckoutApiClient:
    """HTTP client for the checkout step endpoints.

    Usable anywhere a step gateway is expected, so the orchestrator can
    drive a remote checkout service exactly like the in-process one.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        request_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Checkout service base URL.
            timeout: Request timeout in seconds.
            request_id: Optional request ID for correlation.
            transport: Optional httpx transport (ASGI or mock in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.request_id = request_id
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.request_id:
                headers["X-Request-ID"] = self.request_id
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CheckoutApiClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        """Send a request and decode its JSON body.

        Returns:
            Status code and decoded body.

        Raises:
            StepTransportError: If no readable response came back.
        """
        client = await self._get_client()
        try:
            response = await client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.error(
                "Checkout API request failed",
                operation=operation,
                path=path,
                error=str(e),
            )
            raise StepTransportError(operation, detail=str(e)) from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                "Checkout API returned unreadable body",
                operation=operation,
                path=path,
                status_code=response.status_code,
            )
            raise StepTransportError(
                operation, detail="Response body is not JSON", status_code=response.status_code
            ) from e

        return response.status_code, body

    def _rejection_reason(self, operation: str, status_code: int, body: Any) -> str:
        """Pull the rejection message out of an error response.

        Raises:
            StepTransportError: If the response is not a step rejection.
        """
        if (
            status_code == 400
            and isinstance(body, dict)
            and isinstance(body.get("error"), str)
            and body["error"]
            and body.get("errorCode") != MALFORMED_REQUEST
        ):
            return body["error"]

        logger.warning(
            "Checkout API call failed",
            operation=operation,
            status_code=status_code,
            error_code=body.get("errorCode") if isinstance(body, dict) else None,
        )
        raise StepTransportError(
            operation,
            detail=body.get("error") if isinstance(body, dict) else None,
            status_code=status_code,
        )

    async def _submit_step(
        self,
        operation: str,
        payload: dict[str, Any],
        id_field: str,
    ) -> StepSubmissionResult:
        status_code, body = await self._request(
            operation, "POST", f"/api/checkout/{operation}", json=payload
        )

        if status_code != 200:
            return StepSubmissionResult.reject(
                self._rejection_reason(operation, status_code, body)
            )

        identifier = body.get(id_field) if isinstance(body, dict) else None
        if not identifier:
            raise StepTransportError(
                operation, detail=f"Response is missing {id_field}", status_code=status_code
            )

        return StepSubmissionResult.accept(identifier, message=body.get("message"))

    # -------------------------------------------------------------------------
    # Step Endpoints
    # -------------------------------------------------------------------------

    async def submit_account(self, fields: AccountFields) -> StepSubmissionResult:
        return await self._submit_step("account", account_payload(fields), "accountId")

    async def submit_shipping(self, fields: ShippingFields) -> StepSubmissionResult:
        return await self._submit_step("shipping", shipping_payload(fields), "shippingId")

    async def submit_payment(self, fields: PaymentFields) -> StepSubmissionResult:
        return await self._submit_step("payment", payment_payload(fields), "paymentId")

    async def complete_order(self, request: CompletionRequest) -> CompletionResult:
        """Complete the order with the ids collected by the wizard.

        Raises:
            StepTransportError: On any failure other than a rejection.
        """
        status_code, body = await self._request(
            "complete", "POST", "/api/checkout/complete", json=completion_payload(request)
        )

        if status_code != 200:
            return CompletionResult.reject(
                self._rejection_reason("complete", status_code, body)
            )

        try:
            confirmation = OrderConfirmation(
                order_id=body["orderId"],
                total=Decimal(str(body["total"])),
                currency=body.get("currency", "USD"),
                estimated_delivery=datetime.fromisoformat(body["estimatedDelivery"]),
                message=body.get("message") or "Order completed successfully",
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise StepTransportError(
                "complete", detail=f"Unexpected response: {e}", status_code=status_code
            ) from e

        if not confirmation.order_id:
            raise StepTransportError("complete", detail="Response is missing orderId")

        return CompletionResult.accept(confirmation)

    async def get_summary(self, discount_code: str | None = None) -> OrderSummary:
        """Fetch the order summary.

        Raises:
            StepTransportError: If the summary cannot be fetched.
        """
        params = {"discountCode": discount_code} if discount_code else None
        status_code, body = await self._request(
            "summary", "GET", "/api/checkout/summary", params=params
        )

        if status_code != 200 or not isinstance(body, dict):
            raise StepTransportError("summary", status_code=status_code)

        try:
            discount = body.get("discount")
            return OrderSummary(
                subtotal=Decimal(str(body["subtotal"])),
                tax=Decimal(str(body["tax"])),
                shipping=Decimal(str(body["shipping"])),
                total=Decimal(str(body["total"])),
                currency=body["currency"],
                items=tuple(
                    OrderLineItem(
                        id=str(item["id"]),
                        name=item["name"],
                        price=Decimal(str(item["price"])),
                        quantity=int(item["quantity"]),
                    )
                    for item in body["items"]
                ),
                discount_code=body.get("discountCode"),
                discount=Decimal(str(discount)) if discount is not None else None,
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise StepTransportError(
                "summary", detail=f"Unexpected response: {e}", status_code=status_code
            ) from e
