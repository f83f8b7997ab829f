"""Checkout wizard state machine.

Deterministic step transitions for the checkout wizard. The wizard only
moves forward one step at a time, may step back from shipping or
payment, and stops for good once the order is complete.
"""

from enum import Enum

from checkout_wizard.domain.exceptions import InvalidStepTransitionError


class CheckoutStep(str, Enum):
    """Checkout wizard steps.

    State diagram:
        ACCOUNT
          │  ▲
          │  │ back
          ▼  │
        SHIPPING
          │  ▲
          │  │ back
          ▼  │
        PAYMENT
          │
          │ payment accepted + order completed
          ▼
        COMPLETE
    """

    ACCOUNT = "account"
    SHIPPING = "shipping"
    PAYMENT = "payment"
    COMPLETE = "complete"

    @property
    def position(self) -> int:
        """Zero-based position of the step in the wizard."""
        return _STEP_ORDER.index(self)

    def can_transition_to(self, target: "CheckoutStep") -> bool:
        """Check if transition to target step is valid.

        Args:
            target: Step to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _STEP_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["CheckoutStep"]:
        """Get valid target steps, in wizard order.

        Returns:
            Steps that can be transitioned to.
        """
        allowed = _STEP_TRANSITIONS.get(self, set())
        return [step for step in _STEP_ORDER if step in allowed]

    def next_step(self) -> "CheckoutStep | None":
        """Get the step that follows this one, if any."""
        if self.is_terminal():
            return None
        return _STEP_ORDER[self.position + 1]

    def previous_step(self) -> "CheckoutStep | None":
        """Get the step a back action returns to, if any."""
        if not self.can_go_back():
            return None
        return _STEP_ORDER[self.position - 1]

    def can_go_back(self) -> bool:
        """Check if a back action is allowed from this step."""
        return self in {CheckoutStep.SHIPPING, CheckoutStep.PAYMENT}

    def is_terminal(self) -> bool:
        """Check if this is the terminal step.

        Returns:
            True if no further transitions are possible.
        """
        return len(_STEP_TRANSITIONS.get(self, set())) == 0

    def accepts_input(self) -> bool:
        """Check if this step collects form fields."""
        return self in {CheckoutStep.ACCOUNT, CheckoutStep.SHIPPING, CheckoutStep.PAYMENT}


_STEP_ORDER: list[CheckoutStep] = [
    CheckoutStep.ACCOUNT,
    CheckoutStep.SHIPPING,
    CheckoutStep.PAYMENT,
    CheckoutStep.COMPLETE,
]

_STEP_TRANSITIONS: dict[CheckoutStep, set[CheckoutStep]] = {
    CheckoutStep.ACCOUNT: {CheckoutStep.SHIPPING},
    CheckoutStep.SHIPPING: {CheckoutStep.PAYMENT, CheckoutStep.ACCOUNT},
    CheckoutStep.PAYMENT: {CheckoutStep.COMPLETE, CheckoutStep.SHIPPING},
    CheckoutStep.COMPLETE: set(),  # Terminal state
}

# Labels shown by the step indicator; completion is not a numbered step.
STEP_LABELS: list[str] = ["Account", "Shipping", "Payment"]


def validate_step_transition(
    session_id: str,
    current_step: CheckoutStep,
    target_step: CheckoutStep,
) -> None:
    """Validate and raise if a wizard transition is invalid.

    Args:
        session_id: Session identifier for error message.
        current_step: Step the session is on.
        target_step: Requested step.

    Raises:
        InvalidStepTransitionError: If transition is not valid.
    """
    if not current_step.can_transition_to(target_step):
        raise InvalidStepTransitionError(
            session_id=session_id,
            current_step=current_step.value,
            target_step=target_step.value,
            allowed_transitions=[s.value for s in current_step.allowed_transitions()],
        )
