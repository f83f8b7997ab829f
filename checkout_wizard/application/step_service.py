"""Step processing service.

The server side of each checkout step: wait out the simulated latency,
validate the step's fields, and mint an identifier for accepted input.
Rejections are returned as results, never raised.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import structlog

from checkout_wizard.domain.failure_policy import DemoSentinelPolicy, NoSimulatedFailures
from checkout_wizard.domain.validation import StepValidator
from checkout_wizard.domain.value_objects import (
    DEMO_ORDER_SUMMARY,
    AccountFields,
    CompletionRequest,
    CompletionResult,
    OrderConfirmation,
    OrderSummary,
    PaymentFields,
    ShippingFields,
    StepSubmissionResult,
)
from checkout_wizard.infrastructure.config import Settings, settings
from checkout_wizard.infrastructure.identifiers import IdentifierGenerator
from checkout_wizard.infrastructure.latency import LatencyPolicy, NoLatency, latency_from_settings

logger = structlog.get_logger()

ACCOUNT_VERIFIED = "Account verified successfully"
SHIPPING_VERIFIED = "Shipping address verified"
PAYMENT_PROCESSED = "Payment processed successfully"
ORDER_COMPLETED = "Order completed successfully"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StepService:
    """Validates checkout steps and completes orders.

    Exposes the same operations as the HTTP client, so the orchestrator
    can use either one as its step gateway.
    """

    def __init__(
        self,
        validator: StepValidator | None = None,
        identifiers: IdentifierGenerator | None = None,
        latency: LatencyPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
        order_total: Decimal = Decimal("124.99"),
        currency: str = "USD",
        delivery_estimate_days: int = 7,
        summary: OrderSummary = DEMO_ORDER_SUMMARY,
    ) -> None:
        """Initialize service.

        Args:
            validator: Step validation rules.
            identifiers: Generator for step and order ids.
            latency: Delay applied before every answer.
            clock: Source of the current time.
            order_total: Total reported for completed orders.
            currency: Currency of the order total.
            delivery_estimate_days: Days from completion to delivery.
            summary: Order summary served by get_summary.
        """
        self.validator = validator or StepValidator()
        self.identifiers = identifiers or IdentifierGenerator()
        self.latency = latency or NoLatency()
        self.clock = clock
        self.order_total = order_total
        self.currency = currency
        self.delivery_estimate_days = delivery_estimate_days
        self.summary = summary

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "StepService":
        """Build a service configured from application settings."""
        config = config or settings
        failure_policy = (
            DemoSentinelPolicy() if config.simulated_failures_enabled else NoSimulatedFailures()
        )
        return cls(
            validator=StepValidator(
                failure_policy=failure_policy,
                enforce_expiration_format=config.enforce_expiration_format,
            ),
            latency=latency_from_settings(config),
            order_total=config.order_total,
            currency=config.currency,
            delivery_estimate_days=config.delivery_estimate_days,
        )

    async def submit_account(self, fields: AccountFields) -> StepSubmissionResult:
        await self.latency.wait()

        reason = self.validator.validate_account(fields)
        if reason:
            logger.warning("Account step rejected", reason=reason)
            return StepSubmissionResult.reject(reason)

        account_id = self.identifiers.account_id()
        logger.info("Account step accepted", account_id=account_id)
        return StepSubmissionResult.accept(account_id, message=ACCOUNT_VERIFIED)

    async def submit_shipping(self, fields: ShippingFields) -> StepSubmissionResult:
        await self.latency.wait()

        reason = self.validator.validate_shipping(fields)
        if reason:
            logger.warning("Shipping step rejected", reason=reason)
            return StepSubmissionResult.reject(reason)

        shipping_id = self.identifiers.shipping_id()
        logger.info(
            "Shipping step accepted",
            shipping_id=shipping_id,
            shipping_method=fields.shipping_method,
        )
        return StepSubmissionResult.accept(shipping_id, message=SHIPPING_VERIFIED)

    async def submit_payment(self, fields: PaymentFields) -> StepSubmissionResult:
        await self.latency.wait()

        reason = self.validator.validate_payment(fields)
        if reason:
            logger.warning("Payment step rejected", reason=reason)
            return StepSubmissionResult.reject(reason)

        payment_id = self.identifiers.payment_id()
        logger.info(
            "Payment step accepted",
            payment_id=payment_id,
            card=fields.masked_card_number,
        )
        return StepSubmissionResult.accept(payment_id, message=PAYMENT_PROCESSED)

    async def complete_order(self, request: CompletionRequest) -> CompletionResult:
        """Complete an order from the three step ids.

        Args:
            request: Account, shipping and payment ids.

        Returns:
            Accepted result with a synthetic order, or a rejection.
        """
        await self.latency.wait()

        reason = self.validator.validate_completion(request)
        if reason:
            logger.warning("Order completion rejected", reason=reason)
            return CompletionResult.reject(reason)

        confirmation = OrderConfirmation(
            order_id=self.identifiers.order_id(),
            total=self.order_total,
            currency=self.currency,
            estimated_delivery=self.clock() + timedelta(days=self.delivery_estimate_days),
            message=ORDER_COMPLETED,
        )

        logger.info(
            "Order completed",
            order_id=confirmation.order_id,
            account_id=request.account_id,
            shipping_id=request.shipping_id,
            payment_id=request.payment_id,
            total=str(confirmation.total),
        )
        return CompletionResult.accept(confirmation)

    async def get_summary(self, discount_code: str | None = None) -> OrderSummary:
        """Return the order summary, with a discount code applied if given."""
        await self.latency.wait()
        return self.summary.with_discount(discount_code)


# Global service instance
_step_service: StepService | None = None


def get_step_service() -> StepService:
    """Get or create the step service singleton."""
    global _step_service
    if _step_service is None:
        _step_service = StepService.from_settings()
    return _step_service


def reset_step_service() -> None:
    """Reset step service instance (for testing)."""
    global _step_service
    _step_service = None
