"""Domain entities for the checkout wizard.

The CheckoutSession aggregate holds everything a single checkout attempt
accumulates: the current step, the fields entered on each step, the ids
handed back by each step and the last error shown to the user.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from checkout_wizard.domain.base import AggregateRoot
from checkout_wizard.domain.events import (
    OrderCompleted,
    SessionStarted,
    StepAccepted,
    StepRejected,
    StepReverted,
)
from checkout_wizard.domain.exceptions import (
    IncompleteOrderError,
    InvalidStepTransitionError,
    SubmissionInProgressError,
)
from checkout_wizard.domain.state_machines import CheckoutStep, validate_step_transition
from checkout_wizard.domain.value_objects import (
    AccountFields,
    OrderConfirmation,
    PaymentFields,
    SessionId,
    ShippingFields,
)


@dataclass(frozen=True)
class AuditEntry:
    """One entry of a session's audit trail."""

    action: str
    from_step: str | None = None
    to_step: str | None = None
    details: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(kw_only=True)
class CheckoutSession(AggregateRoot[SessionId]):
    """Checkout session aggregate root.

    Invariants:
        - current_step advances only after the id of the step just
          completed has been assigned, and never past COMPLETE.
        - current_step moves backwards only through go_back().
        - order_id is set if and only if current_step is COMPLETE.
        - a rejected step stores neither its fields nor an id.

    Attributes:
        id: Unique session identifier.
        current_step: Step the wizard is showing.
        account_data: Last accepted account fields.
        shipping_data: Last accepted shipping fields.
        payment_data: Last accepted payment fields.
        account_id: Id returned by the account step.
        shipping_id: Id returned by the shipping step.
        payment_id: Id returned by the payment step.
        order_id: Id returned by the completion call.
        confirmation: Full completion result.
        last_error: Message from the most recent failed operation.
        submitting_step: Step whose submission is in flight, if any.
        audit_trail: Ordered record of what happened to the session.
    """

    id: SessionId
    current_step: CheckoutStep = CheckoutStep.ACCOUNT
    account_data: AccountFields | None = None
    shipping_data: ShippingFields | None = None
    payment_data: PaymentFields | None = None
    account_id: str | None = None
    shipping_id: str | None = None
    payment_id: str | None = None
    order_id: str | None = None
    confirmation: OrderConfirmation | None = None
    last_error: str | None = None
    submitting_step: CheckoutStep | None = None
    audit_trail: list[AuditEntry] = field(default_factory=list)

    @classmethod
    def create(cls, session_id: SessionId | None = None) -> "CheckoutSession":
        """Start a new checkout attempt on the account step.

        Args:
            session_id: Optional pre-generated session ID.

        Returns:
            New CheckoutSession instance.
        """
        session = cls(id=session_id or SessionId.generate())
        session._audit("started", to_step=CheckoutStep.ACCOUNT)
        session._record_event(
            SessionStarted(
                aggregate_id=str(session.id),
                aggregate_type="CheckoutSession",
                session_id=str(session.id),
            )
        )
        return session

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    @property
    def is_submitting(self) -> bool:
        return self.submitting_step is not None

    @property
    def is_complete(self) -> bool:
        return self.current_step == CheckoutStep.COMPLETE

    # -------------------------------------------------------------------------
    # Submission Guard
    # -------------------------------------------------------------------------

    def begin_submission(self, step: CheckoutStep) -> None:
        """Mark a step submission as in flight.

        Clears the previous error, the way the form does when the user
        presses submit again.

        Args:
            step: Step being submitted.

        Raises:
            SubmissionInProgressError: If another submission is pending.
            InvalidStepTransitionError: If step is not the current step.
        """
        if self.submitting_step is not None:
            raise SubmissionInProgressError(str(self.id), self.submitting_step.value)

        if step != self.current_step or not step.accepts_input():
            raise InvalidStepTransitionError(
                session_id=str(self.id),
                current_step=self.current_step.value,
                target_step=step.value,
                allowed_transitions=[s.value for s in self.current_step.allowed_transitions()],
            )

        self.submitting_step = step
        self.last_error = None

    def end_submission(self) -> None:
        """Clear the in-flight marker."""
        self.submitting_step = None

    # -------------------------------------------------------------------------
    # Step Outcomes
    # -------------------------------------------------------------------------

    def accept_account(self, fields: AccountFields, account_id: str) -> None:
        """Store accepted account fields and move to shipping."""
        self._advance(CheckoutStep.ACCOUNT, account_id)
        self.account_data = fields
        self.account_id = account_id

    def accept_shipping(self, fields: ShippingFields, shipping_id: str) -> None:
        """Store accepted shipping fields and move to payment."""
        self._advance(CheckoutStep.SHIPPING, shipping_id)
        self.shipping_data = fields
        self.shipping_id = shipping_id

    def accept_payment(self, fields: PaymentFields, payment_id: str) -> None:
        """Store accepted payment fields.

        The session stays on the payment step until the order
        completion call succeeds.

        Raises:
            InvalidStepTransitionError: If the session is not on payment.
        """
        if self.current_step != CheckoutStep.PAYMENT:
            raise InvalidStepTransitionError(
                session_id=str(self.id),
                current_step=self.current_step.value,
                target_step=CheckoutStep.PAYMENT.value,
                allowed_transitions=[s.value for s in self.current_step.allowed_transitions()],
            )
        if not payment_id:
            raise ValueError("payment_id must not be empty")

        self.payment_data = fields
        self.payment_id = payment_id
        self.last_error = None
        self._touch()
        self._audit("payment_accepted", from_step=self.current_step, to_step=self.current_step)
        self._record_event(
            StepAccepted(
                aggregate_id=str(self.id),
                aggregate_type="CheckoutSession",
                session_id=str(self.id),
                step=CheckoutStep.PAYMENT.value,
                identifier=payment_id,
            )
        )

    def complete(self, confirmation: OrderConfirmation) -> None:
        """Record the completed order and finish the wizard.

        Args:
            confirmation: Result of the completion call.

        Raises:
            InvalidStepTransitionError: If the session is not on payment.
            IncompleteOrderError: If any step id is missing.
        """
        validate_step_transition(str(self.id), self.current_step, CheckoutStep.COMPLETE)

        missing = [
            name
            for name, value in (
                ("account_id", self.account_id),
                ("shipping_id", self.shipping_id),
                ("payment_id", self.payment_id),
            )
            if not value
        ]
        if missing:
            raise IncompleteOrderError(str(self.id), missing)
        if not confirmation.order_id:
            raise ValueError("order_id must not be empty")

        from_step = self.current_step
        self.current_step = CheckoutStep.COMPLETE
        self.order_id = confirmation.order_id
        self.confirmation = confirmation
        self.last_error = None
        self._touch()
        self._audit(
            "order_completed",
            from_step=from_step,
            to_step=self.current_step,
            details={"order_id": confirmation.order_id},
        )
        self._record_event(
            OrderCompleted(
                aggregate_id=str(self.id),
                aggregate_type="CheckoutSession",
                session_id=str(self.id),
                order_id=confirmation.order_id,
                total=str(confirmation.total),
                currency=confirmation.currency,
            )
        )

    def reject(self, reason: str) -> None:
        """Record a failed operation; the session stays where it is.

        Args:
            reason: Message to show the user.
        """
        self.last_error = reason
        self._touch()
        self._audit(
            "rejected",
            from_step=self.current_step,
            to_step=self.current_step,
            details={"reason": reason},
        )
        self._record_event(
            StepRejected(
                aggregate_id=str(self.id),
                aggregate_type="CheckoutSession",
                session_id=str(self.id),
                step=self.current_step.value,
                reason=reason,
            )
        )

    def go_back(self) -> None:
        """Return to the previous step, keeping everything entered so far.

        Raises:
            InvalidStepTransitionError: From the account or complete step.
            SubmissionInProgressError: While a submission is pending.
        """
        if self.submitting_step is not None:
            raise SubmissionInProgressError(str(self.id), self.submitting_step.value)

        previous = self.current_step.previous_step()
        if previous is None:
            raise InvalidStepTransitionError(
                session_id=str(self.id),
                current_step=self.current_step.value,
                target_step="back",
                allowed_transitions=[s.value for s in self.current_step.allowed_transitions()],
            )

        from_step = self.current_step
        self.current_step = previous
        self.last_error = None
        self._touch()
        self._audit("back", from_step=from_step, to_step=previous)
        self._record_event(
            StepReverted(
                aggregate_id=str(self.id),
                aggregate_type="CheckoutSession",
                session_id=str(self.id),
                from_step=from_step.value,
                to_step=previous.value,
            )
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _advance(self, source: CheckoutStep, identifier: str) -> None:
        target = source.next_step()
        if self.current_step != source:
            raise InvalidStepTransitionError(
                session_id=str(self.id),
                current_step=self.current_step.value,
                target_step=target.value,
                allowed_transitions=[s.value for s in self.current_step.allowed_transitions()],
            )
        validate_step_transition(str(self.id), source, target)
        if not identifier:
            raise ValueError("identifier must not be empty")

        from_step = self.current_step
        self.current_step = target
        self.last_error = None
        self._touch()
        self._audit(f"{from_step.value}_accepted", from_step=from_step, to_step=target)
        self._record_event(
            StepAccepted(
                aggregate_id=str(self.id),
                aggregate_type="CheckoutSession",
                session_id=str(self.id),
                step=from_step.value,
                identifier=identifier,
            )
        )

    def _audit(
        self,
        action: str,
        from_step: CheckoutStep | None = None,
        to_step: CheckoutStep | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.audit_trail.append(
            AuditEntry(
                action=action,
                from_step=from_step.value if from_step else None,
                to_step=to_step.value if to_step else None,
                details=details,
            )
        )
