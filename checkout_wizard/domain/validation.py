"""Step validation rules.

Each ``validate_*`` method returns None when the step's fields are
acceptable, or the user-facing rejection message. Validation is a pure
function of its input; minting identifiers for accepted steps is left
to the caller.
"""

import re

from checkout_wizard.domain.failure_policy import DemoSentinelPolicy, SimulatedFailurePolicy
from checkout_wizard.domain.value_objects import (
    AccountFields,
    CompletionRequest,
    PaymentFields,
    ShippingFields,
    ShippingMethod,
)

# ============================================================================
# Rejection Messages
# ============================================================================

ACCOUNT_FIELDS_REQUIRED = "Email and password are required"
INVALID_EMAIL_FORMAT = "Invalid email format"
PASSWORD_TOO_SHORT = "Password must be at least 8 characters"

SHIPPING_FIELDS_REQUIRED = "All shipping fields are required"
INVALID_SHIPPING_METHOD = "Invalid shipping method"

PAYMENT_FIELDS_REQUIRED = "All payment fields are required"
INVALID_CARD_NUMBER = "Invalid card number"
INVALID_CVC = "Invalid CVC"
INVALID_EXPIRATION_MONTH = "Invalid month"
INVALID_EXPIRATION_YEAR = "Invalid year"

ORDER_INFORMATION_REQUIRED = "Missing required order information"

# ============================================================================
# Format Rules
# ============================================================================

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
DIGITS_PATTERN = re.compile(r"[0-9]+")
CVC_PATTERN = re.compile(r"[0-9]{3,4}")
MONTH_PATTERN = re.compile(r"0[1-9]|1[0-2]")
YEAR_PATTERN = re.compile(r"[0-9]{4}")

MIN_PASSWORD_LENGTH = 8
MIN_CARD_NUMBER_LENGTH = 13
MAX_CARD_NUMBER_LENGTH = 19


def _missing(*values: str | None) -> bool:
    return any(not value for value in values)


class StepValidator:
    """Validates the fields of each checkout step.

    Checks run in a fixed order and the first failure wins: presence,
    then format, then the simulated failure policy.
    """

    def __init__(
        self,
        failure_policy: SimulatedFailurePolicy | None = None,
        enforce_expiration_format: bool = True,
    ) -> None:
        """Initialize validator.

        Args:
            failure_policy: Business-rule checks run after format checks.
            enforce_expiration_format: Reject malformed expiry month/year.
                When False, expiry values are only checked for presence.
        """
        self.failure_policy = failure_policy or DemoSentinelPolicy()
        self.enforce_expiration_format = enforce_expiration_format

    def validate_account(self, fields: AccountFields) -> str | None:
        if _missing(fields.email, fields.password):
            return ACCOUNT_FIELDS_REQUIRED

        if not EMAIL_PATTERN.fullmatch(fields.email):
            return INVALID_EMAIL_FORMAT

        # Length in code points, not encoded units.
        if len(fields.password) < MIN_PASSWORD_LENGTH:
            return PASSWORD_TOO_SHORT

        return self.failure_policy.account_conflict(fields)

    def validate_shipping(self, fields: ShippingFields) -> str | None:
        if _missing(
            fields.address_line1,
            fields.street_name,
            fields.postcode,
            fields.shipping_method,
        ):
            return SHIPPING_FIELDS_REQUIRED

        if not ShippingMethod.is_valid(fields.shipping_method):
            return INVALID_SHIPPING_METHOD

        return self.failure_policy.shipping_rejection(fields)

    def validate_payment(self, fields: PaymentFields) -> str | None:
        if _missing(
            fields.name_on_card,
            fields.card_number,
            fields.expiration_month,
            fields.expiration_year,
            fields.cvc,
        ):
            return PAYMENT_FIELDS_REQUIRED

        card_number = fields.card_number
        if (
            not DIGITS_PATTERN.fullmatch(card_number)
            or not MIN_CARD_NUMBER_LENGTH <= len(card_number) <= MAX_CARD_NUMBER_LENGTH
        ):
            return INVALID_CARD_NUMBER

        if not CVC_PATTERN.fullmatch(fields.cvc):
            return INVALID_CVC

        if self.enforce_expiration_format:
            if not MONTH_PATTERN.fullmatch(fields.expiration_month):
                return INVALID_EXPIRATION_MONTH
            if not YEAR_PATTERN.fullmatch(fields.expiration_year):
                return INVALID_EXPIRATION_YEAR

        return self.failure_policy.payment_rejection(fields)

    def validate_completion(self, request: CompletionRequest) -> str | None:
        if _missing(request.account_id, request.shipping_id, request.payment_id):
            return ORDER_INFORMATION_REQUIRED
        return None
