"""Value objects for the checkout domain.

Step field records, step outcomes, the order confirmation and the
static order summary. All of them are immutable and compared by value.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self
from uuid import UUID, uuid4

from checkout_wizard.domain.base import ValueObject

CENTS = Decimal("0.01")


# ============================================================================
# Typed Identifiers
# ============================================================================


@dataclass(frozen=True)
class SessionId(ValueObject):
    """Strongly-typed checkout session identifier."""

    value: UUID

    @classmethod
    def generate(cls) -> Self:
        """Generate a new session ID.

        Returns:
            New SessionId with random UUID.
        """
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create SessionId from string representation.

        Raises:
            ValueError: If value is not a UUID.
        """
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


# ============================================================================
# Step Field Records
# ============================================================================


class ShippingMethod(str, Enum):
    """Delivery options offered on the shipping step."""

    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"

    @classmethod
    def is_valid(cls, value: str | None) -> bool:
        """Check whether a raw form value names a known method."""
        return value in {method.value for method in cls}


@dataclass(frozen=True)
class AccountFields(ValueObject):
    """Fields entered on the account step."""

    email: str | None = None
    password: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class ShippingFields(ValueObject):
    """Fields entered on the shipping step.

    The shipping method is kept as the raw form value so that an
    unknown method reaches the validator instead of failing to decode.
    """

    address_line1: str | None = None
    street_name: str | None = None
    postcode: str | None = None
    shipping_method: str | None = None


@dataclass(frozen=True)
class PaymentFields(ValueObject):
    """Fields entered on the payment step."""

    name_on_card: str | None = None
    card_number: str | None = field(default=None, repr=False)
    expiration_month: str | None = None
    expiration_year: str | None = None
    cvc: str | None = field(default=None, repr=False)

    @property
    def masked_card_number(self) -> str | None:
        """Card number reduced to its last four digits."""
        if not self.card_number:
            return None
        return f"**** {self.card_number[-4:]}"


@dataclass(frozen=True)
class CompletionRequest(ValueObject):
    """Identifiers handed to the order-completion call."""

    account_id: str | None = None
    shipping_id: str | None = None
    payment_id: str | None = None


# ============================================================================
# Step Outcomes
# ============================================================================


@dataclass(frozen=True)
class StepSubmissionResult(ValueObject):
    """Outcome of submitting one step: accepted with an id, or rejected.

    Attributes:
        accepted: Whether the step was accepted.
        identifier: Opaque id minted for an accepted step.
        reason: User-facing rejection message.
        message: User-facing success message.
    """

    accepted: bool
    identifier: str | None = None
    reason: str | None = None
    message: str | None = None

    @classmethod
    def accept(cls, identifier: str, message: str | None = None) -> Self:
        return cls(accepted=True, identifier=identifier, message=message)

    @classmethod
    def reject(cls, reason: str) -> Self:
        return cls(accepted=False, reason=reason)

    @property
    def rejected(self) -> bool:
        return not self.accepted


@dataclass(frozen=True)
class OrderConfirmation(ValueObject):
    """Synthetic order produced by the completion call."""

    order_id: str
    total: Decimal
    currency: str
    estimated_delivery: datetime
    message: str = "Order completed successfully"


@dataclass(frozen=True)
class CompletionResult(ValueObject):
    """Outcome of the order-completion call."""

    accepted: bool
    confirmation: OrderConfirmation | None = None
    reason: str | None = None

    @classmethod
    def accept(cls, confirmation: OrderConfirmation) -> Self:
        return cls(accepted=True, confirmation=confirmation)

    @classmethod
    def reject(cls, reason: str) -> Self:
        return cls(accepted=False, reason=reason)


# ============================================================================
# Order Summary
# ============================================================================


@dataclass(frozen=True)
class OrderLineItem(ValueObject):
    """One line of the order summary."""

    id: str
    name: str
    price: Decimal
    quantity: int = 1


@dataclass(frozen=True)
class OrderSummary(ValueObject):
    """Order summary shown alongside the wizard.

    The figures are demo content and are not derived from the line
    items; subtotal in particular does not equal the sum of the lines.

    Attributes:
        discount_code: Code applied to this summary, if any.
        discount: Amount taken off the total for the code.
    """

    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    currency: str
    items: tuple[OrderLineItem, ...]
    discount_code: str | None = None
    discount: Decimal | None = None

    DISCOUNT_RATE = Decimal("0.10")

    @property
    def discounted_total(self) -> Decimal | None:
        if self.discount is None:
            return None
        return self.total - self.discount

    def with_discount(self, code: str | None) -> "OrderSummary":
        """Return a copy with a discount code applied.

        Any non-empty code takes 10% off the subtotal. An empty code
        returns the summary unchanged.

        Args:
            code: Gift card or discount code.

        Returns:
            New OrderSummary; this one is never modified.
        """
        if not code:
            return self
        discount = (self.subtotal * self.DISCOUNT_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)
        return replace(self, discount_code=code, discount=discount)


DEMO_ORDER_SUMMARY = OrderSummary(
    subtotal=Decimal("99.99"),
    tax=Decimal("15.00"),
    shipping=Decimal("10.00"),
    total=Decimal("124.99"),
    currency="USD",
    items=(
        OrderLineItem(id="1", name="Headsets", price=Decimal("99.99")),
        OrderLineItem(id="2", name="Audio Cable", price=Decimal("15.00")),
        OrderLineItem(id="3", name="Protective Case", price=Decimal("25.00")),
    ),
)
