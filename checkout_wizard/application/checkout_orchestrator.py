"""Checkout orchestrator.

Drives a CheckoutSession through the wizard:
- Account -> Shipping -> Payment, one accepted step at a time
- Payment acceptance immediately followed by order completion
- Back navigation from Shipping and Payment
- Rejections and transport failures recorded as the session's last error
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Protocol, TypeVar

import structlog

from checkout_wizard.domain.entities import CheckoutSession
from checkout_wizard.domain.exceptions import SessionNotFoundError
from checkout_wizard.domain.state_machines import CheckoutStep
from checkout_wizard.domain.value_objects import (
    AccountFields,
    CompletionRequest,
    CompletionResult,
    OrderSummary,
    PaymentFields,
    ShippingFields,
    StepSubmissionResult,
)
from checkout_wizard.infrastructure.checkout_client import StepTransportError
from checkout_wizard.infrastructure.config import settings

logger = structlog.get_logger()

F = TypeVar("F", AccountFields, ShippingFields)


class StepGateway(Protocol):
    """Where step submissions are sent.

    Implemented in-process by StepService and over HTTP by
    CheckoutApiClient. Rejections come back as results; transport
    problems raise StepTransportError.
    """

    async def submit_account(self, fields: AccountFields) -> StepSubmissionResult: ...

    async def submit_shipping(self, fields: ShippingFields) -> StepSubmissionResult: ...

    async def submit_payment(self, fields: PaymentFields) -> StepSubmissionResult: ...

    async def complete_order(self, request: CompletionRequest) -> CompletionResult: ...

    async def get_summary(self, discount_code: str | None = None) -> OrderSummary: ...


# ============================================================================
# In-Memory Repository
# ============================================================================


class SessionRepository:
    """In-memory store of checkout sessions.

    Nothing is persisted. Completed sessions are never stored, and a
    session whose ``updated_at`` is older than the TTL is dropped the next
    time the store is read or written. A session with a submission in
    flight is never dropped.
    """

    def __init__(self, ttl_seconds: float | None = None) -> None:
        """Initialize repository.

        Args:
            ttl_seconds: Idle lifetime of a session, defaults to
                settings.session_ttl_seconds.
        """
        if ttl_seconds is None:
            ttl_seconds = settings.session_ttl_seconds
        self.ttl = timedelta(seconds=ttl_seconds)
        self._sessions: dict[str, CheckoutSession] = {}

    def save(self, session: CheckoutSession) -> None:
        self._purge_expired()
        if session.is_complete:
            self._sessions.pop(str(session.id), None)
            return
        self._sessions[str(session.id)] = session

    def get(self, session_id: str) -> CheckoutSession | None:
        self._purge_expired()
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def count(self) -> int:
        self._purge_expired()
        return len(self._sessions)

    def _purge_expired(self) -> None:
        cutoff = datetime.now(timezone.utc) - self.ttl
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.updated_at < cutoff and not session.is_submitting
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info("Expired checkout sessions dropped", count=len(expired))


# Global repository instance
_session_repo: SessionRepository | None = None


def get_session_repository() -> SessionRepository:
    """Get session repository singleton."""
    global _session_repo
    if _session_repo is None:
        _session_repo = SessionRepository()
    return _session_repo


def reset_session_repository() -> None:
    """Reset session repository instance (for testing)."""
    global _session_repo
    _session_repo = None


# ============================================================================
# Result Types
# ============================================================================


@dataclass
class StepOutcome:
    """Result of submitting a step through the orchestrator.

    Attributes:
        session: The session after the submission.
        accepted: Whether the step (and, for payment, the order) went through.
        identifier: Id minted for the step, or the order id for payment.
        error: Message shown to the user when not accepted.
        message: Success message from the step.
    """

    session: CheckoutSession
    accepted: bool
    identifier: str | None = None
    error: str | None = None
    message: str | None = None


# ============================================================================
# Checkout Orchestrator
# ============================================================================


class CheckoutOrchestrator:
    """Sequences the checkout steps for a session.

    Only one submission may be in flight per session; a second one is
    refused with SubmissionInProgressError while the first is waiting on
    the gateway. Submissions are never retried or cancelled.
    """

    def __init__(
        self,
        gateway: StepGateway,
        session_repo: SessionRepository | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            gateway: Where step submissions are sent.
            session_repo: Session store used by start/get/abandon.
            request_id: Request ID for correlation.
        """
        self.gateway = gateway
        self.session_repo = session_repo or get_session_repository()
        self.request_id = request_id

    # -------------------------------------------------------------------------
    # Session Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> CheckoutSession:
        """Begin a new checkout attempt on the account step."""
        session = CheckoutSession.create()
        self.session_repo.save(session)
        self._log_events(session)
        return session

    def get_session(self, session_id: str) -> CheckoutSession:
        """Look up a session.

        Raises:
            SessionNotFoundError: If no such session exists.
        """
        session = self.session_repo.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def abandon(self, session_id: str) -> None:
        """Discard a session.

        Raises:
            SessionNotFoundError: If no such session exists.
        """
        if not self.session_repo.delete(session_id):
            raise SessionNotFoundError(session_id)
        logger.info("Checkout session abandoned", session_id=session_id, request_id=self.request_id)

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    async def submit_account(self, session: CheckoutSession, fields: AccountFields) -> StepOutcome:
        """Submit the account step; on acceptance move to shipping.

        Raises:
            InvalidStepTransitionError: If the session is not on account.
            SubmissionInProgressError: If a submission is already pending.
        """
        return await self._submit_step(
            session,
            CheckoutStep.ACCOUNT,
            fields,
            self.gateway.submit_account,
            session.accept_account,
        )

    async def submit_shipping(self, session: CheckoutSession, fields: ShippingFields) -> StepOutcome:
        """Submit the shipping step; on acceptance move to payment.

        Raises:
            InvalidStepTransitionError: If the session is not on shipping.
            SubmissionInProgressError: If a submission is already pending.
        """
        return await self._submit_step(
            session,
            CheckoutStep.SHIPPING,
            fields,
            self.gateway.submit_shipping,
            session.accept_shipping,
        )

    async def submit_payment(self, session: CheckoutSession, fields: PaymentFields) -> StepOutcome:
        """Submit the payment step and complete the order.

        A declined payment leaves the session untouched apart from the
        error. An accepted payment is stored even if completing the order
        then fails, in which case the session stays on payment. A
        completed session is released from the session store.

        Raises:
            InvalidStepTransitionError: If the session is not on payment.
            SubmissionInProgressError: If a submission is already pending.
        """
        session.begin_submission(CheckoutStep.PAYMENT)
        try:
            try:
                result = await self.gateway.submit_payment(fields)
            except StepTransportError as e:
                return self._fail(session, e.message, detail=e.detail)

            if result.rejected:
                return self._fail(session, result.reason)

            session.accept_payment(fields, result.identifier)

            request = CompletionRequest(
                account_id=session.account_id,
                shipping_id=session.shipping_id,
                payment_id=session.payment_id,
            )
            try:
                completion = await self.gateway.complete_order(request)
            except StepTransportError as e:
                return self._fail(session, e.message, detail=e.detail)

            if not completion.accepted:
                return self._fail(session, completion.reason)

            session.complete(completion.confirmation)
            self.session_repo.save(session)

            logger.info(
                "Checkout completed",
                session_id=str(session.id),
                order_id=session.order_id,
                active_sessions=self.session_repo.count(),
                request_id=self.request_id,
            )
            return StepOutcome(
                session=session,
                accepted=True,
                identifier=session.order_id,
                message=completion.confirmation.message,
            )
        finally:
            session.end_submission()
            self._log_events(session)

    def go_back(self, session: CheckoutSession) -> CheckoutSession:
        """Return to the previous step.

        Raises:
            InvalidStepTransitionError: From the account or complete step.
            SubmissionInProgressError: While a submission is pending.
        """
        session.go_back()
        self._log_events(session)
        return session

    async def get_summary(self, discount_code: str | None = None) -> OrderSummary | None:
        """Fetch the order summary, or None if it cannot be fetched."""
        try:
            return await self.gateway.get_summary(discount_code)
        except StepTransportError as e:
            logger.warning(
                "Order summary unavailable",
                error=e.message,
                detail=e.detail,
                request_id=self.request_id,
            )
            return None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _submit_step(
        self,
        session: CheckoutSession,
        step: CheckoutStep,
        fields: F,
        send: Callable[[F], Awaitable[StepSubmissionResult]],
        accept: Callable[[F, str], None],
    ) -> StepOutcome:
        session.begin_submission(step)
        try:
            try:
                result = await send(fields)
            except StepTransportError as e:
                return self._fail(session, e.message, detail=e.detail)

            if result.rejected:
                return self._fail(session, result.reason)

            accept(fields, result.identifier)

            logger.info(
                "Checkout step accepted",
                session_id=str(session.id),
                step=step.value,
                next_step=session.current_step.value,
                request_id=self.request_id,
            )
            return StepOutcome(
                session=session,
                accepted=True,
                identifier=result.identifier,
                message=result.message,
            )
        finally:
            session.end_submission()
            self._log_events(session)

    def _fail(
        self,
        session: CheckoutSession,
        reason: str | None,
        detail: str | None = None,
    ) -> StepOutcome:
        message = reason or "An error occurred"
        session.reject(message)
        logger.warning(
            "Checkout step failed",
            session_id=str(session.id),
            step=session.current_step.value,
            error=message,
            detail=detail,
            request_id=self.request_id,
        )
        return StepOutcome(session=session, accepted=False, error=message)

    def _log_events(self, session: CheckoutSession) -> None:
        for event in session.collect_events():
            logger.debug("Checkout event", **event.to_dict())


def get_checkout_orchestrator(
    gateway: StepGateway | None = None,
    request_id: str | None = None,
) -> CheckoutOrchestrator:
    """Create an orchestrator backed by the in-process step service.

    Args:
        gateway: Step gateway, defaults to the step service singleton.
        request_id: Request ID for correlation.

    Returns:
        CheckoutOrchestrator using the shared session repository.
    """
    from checkout_wizard.application.step_service import get_step_service

    return CheckoutOrchestrator(
        gateway=gateway or get_step_service(),
        session_repo=get_session_repository(),
        request_id=request_id,
    )
