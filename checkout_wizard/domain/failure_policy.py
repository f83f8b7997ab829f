"""Simulated failure policies.

The demo checkout has a few hardcoded inputs that always fail, so the
error paths can be exercised by hand. They live here, behind a small
policy interface, so a real account/address/card check can replace them
without touching the validator or the wizard.

Demo sentinels:
- email ``error@test.com``: the account already exists
- postcode ``00000``: the address cannot be delivered to
- card ``4000000000000002``: the card is declined
"""

from typing import Protocol

from checkout_wizard.domain.value_objects import AccountFields, PaymentFields, ShippingFields

DUPLICATE_EMAIL = "error@test.com"
UNDELIVERABLE_POSTCODE = "00000"
DECLINED_CARD_NUMBER = "4000000000000002"

EMAIL_ALREADY_REGISTERED = "This email is already registered"
INVALID_POSTCODE = "Invalid postcode"
CARD_DECLINED = "Card declined"


class SimulatedFailurePolicy(Protocol):
    """Business-rule checks run after a step's format checks pass.

    Each method returns a rejection message, or None to accept.
    """

    def account_conflict(self, fields: AccountFields) -> str | None: ...

    def shipping_rejection(self, fields: ShippingFields) -> str | None: ...

    def payment_rejection(self, fields: PaymentFields) -> str | None: ...


class DemoSentinelPolicy:
    """Rejects the three demo sentinel values."""

    def account_conflict(self, fields: AccountFields) -> str | None:
        if fields.email == DUPLICATE_EMAIL:
            return EMAIL_ALREADY_REGISTERED
        return None

    def shipping_rejection(self, fields: ShippingFields) -> str | None:
        if fields.postcode == UNDELIVERABLE_POSTCODE:
            return INVALID_POSTCODE
        return None

    def payment_rejection(self, fields: PaymentFields) -> str | None:
        if fields.card_number == DECLINED_CARD_NUMBER:
            return CARD_DECLINED
        return None


class NoSimulatedFailures:
    """Accepts everything that passes the format checks."""

    def account_conflict(self, fields: AccountFields) -> str | None:
        return None

    def shipping_rejection(self, fields: ShippingFields) -> str | None:
        return None

    def payment_rejection(self, fields: PaymentFields) -> str | None:
        return None
