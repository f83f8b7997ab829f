"""API schemas for the checkout wizard.

Pydantic models for request/response validation and serialization.
Everything on the wire is camelCase; Python code uses snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from checkout_wizard.domain.value_objects import (
    AccountFields,
    CompletionRequest,
    PaymentFields,
    ShippingFields,
)


class CamelModel(BaseModel):
    """Base schema serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(CamelModel):
    """Standard error response.

    Step rejections use this shape with the rejection message verbatim
    in ``error``.
    """

    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional error context")
    request_id: str | None = Field(default=None, description="Request ID for correlation")


# ============================================================================
# Step Request Schemas
# ============================================================================
# Fields are optional so that missing values reach the step validator and
# come back as a rejection rather than a decode failure.


class AccountRequest(CamelModel):
    """Account step form."""

    email: str | None = None
    password: str | None = None

    def to_fields(self) -> AccountFields:
        return AccountFields(email=self.email, password=self.password)


class ShippingRequest(CamelModel):
    """Shipping step form."""

    address_line1: str | None = Field(default=None, alias="addressLine1")
    street_name: str | None = None
    postcode: str | None = None
    shipping_method: str | None = None

    def to_fields(self) -> ShippingFields:
        return ShippingFields(
            address_line1=self.address_line1,
            street_name=self.street_name,
            postcode=self.postcode,
            shipping_method=self.shipping_method,
        )


class PaymentRequest(CamelModel):
    """Payment step form."""

    name_on_card: str | None = None
    card_number: str | None = None
    expiration_month: str | None = None
    expiration_year: str | None = None
    cvc: str | None = None

    def to_fields(self) -> PaymentFields:
        return PaymentFields(
            name_on_card=self.name_on_card,
            card_number=self.card_number,
            expiration_month=self.expiration_month,
            expiration_year=self.expiration_year,
            cvc=self.cvc,
        )


class CompleteRequest(CamelModel):
    """Identifiers collected by the wizard."""

    account_id: str | None = None
    shipping_id: str | None = None
    payment_id: str | None = None

    def to_request(self) -> CompletionRequest:
        return CompletionRequest(
            account_id=self.account_id,
            shipping_id=self.shipping_id,
            payment_id=self.payment_id,
        )


# ============================================================================
# Step Response Schemas
# ============================================================================


class StepResponse(CamelModel):
    """Base response for an accepted step."""

    success: bool = True
    message: str


class AccountResponse(StepResponse):
    account_id: str


class ShippingResponse(StepResponse):
    shipping_id: str


class PaymentResponse(StepResponse):
    payment_id: str


class CompleteResponse(StepResponse):
    """Completed order."""

    order_id: str
    total: float
    currency: str
    estimated_delivery: datetime


# ============================================================================
# Summary Schemas
# ============================================================================


class LineItemSchema(CamelModel):
    """Line item of the order summary."""

    id: str
    name: str
    price: float
    quantity: int


class OrderSummaryResponse(CamelModel):
    """Order summary.

    The discount fields are only present when a discount code was given.
    """

    subtotal: float
    tax: float
    shipping: float
    total: float
    currency: str
    items: list[LineItemSchema]
    discount_code: str | None = None
    discount: float | None = None
    discounted_total: float | None = None


# ============================================================================
# Session Schemas
# ============================================================================


class AccountDataSchema(CamelModel):
    """Accepted account data; the password is never echoed."""

    email: str | None = None


class ShippingDataSchema(CamelModel):
    address_line1: str | None = Field(default=None, alias="addressLine1")
    street_name: str | None = None
    postcode: str | None = None
    shipping_method: str | None = None


class PaymentDataSchema(CamelModel):
    """Accepted payment data with the card number masked and no CVC."""

    name_on_card: str | None = None
    card_number: str | None = Field(default=None, description="Masked, e.g. **** 4242")
    expiration_month: str | None = None
    expiration_year: str | None = None


class ConfirmationSchema(CamelModel):
    order_id: str
    total: float
    currency: str
    estimated_delivery: datetime
    message: str


class AuditEntrySchema(CamelModel):
    """Audit trail entry."""

    timestamp: datetime
    action: str
    from_step: str | None = None
    to_step: str | None = None
    details: dict[str, Any] | None = None


class SessionResponse(CamelModel):
    """Server-side view of a checkout session."""

    id: str
    current_step: str
    step_index: int = Field(..., description="Zero-based position of the current step")
    steps: list[str] = Field(..., description="Labels for the step indicator")
    account_data: AccountDataSchema | None = None
    shipping_data: ShippingDataSchema | None = None
    payment_data: PaymentDataSchema | None = None
    account_id: str | None = None
    shipping_id: str | None = None
    payment_id: str | None = None
    order_id: str | None = None
    confirmation: ConfirmationSchema | None = None
    last_error: str | None = None
    is_submitting: bool = False
    audit_trail: list[AuditEntrySchema] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SessionStepResponse(CamelModel):
    """Result of submitting a step through a session.

    Returned for both accepted and rejected submissions; a rejection
    carries its message in ``error``.
    """

    accepted: bool
    error: str | None = None
    identifier: str | None = None
    session: SessionResponse
