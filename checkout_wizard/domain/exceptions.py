"""Domain exceptions.

Errors raised when a caller drives the checkout wizard in a way its
state machine does not allow. Step validation failures are not
exceptions: they come back as rejected results.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStepTransitionError(DomainError):
    """Raised when the wizard is asked to move somewhere it cannot go.

    Covers submitting a step that is not the current one, going back
    from the first step and anything attempted after completion.
    """

    def __init__(
        self,
        session_id: str,
        current_step: str,
        target_step: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid step transition error.

        Args:
            session_id: ID of the checkout session.
            current_step: Step the session is on.
            target_step: Step that was requested.
            allowed_transitions: Steps reachable from the current one.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot move checkout session {session_id} "
            f"from '{current_step}' to '{target_step}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "session_id": session_id,
                "current_step": current_step,
                "target_step": target_step,
                "allowed_transitions": allowed,
            },
        )


# ============================================================================
# Session Errors
# ============================================================================


class SessionError(DomainError):
    """Base class for checkout session errors."""

    pass


class SessionNotFoundError(SessionError):
    """Raised when a checkout session does not exist."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Checkout session not found: {session_id}",
            details={"session_id": session_id},
        )


class SubmissionInProgressError(SessionError):
    """Raised when a step is submitted while another is still in flight."""

    def __init__(self, session_id: str, step: str) -> None:
        """Initialize submission in progress error.

        Args:
            session_id: ID of the checkout session.
            step: Step whose submission is still pending.
        """
        super().__init__(
            f"Checkout session {session_id} already has a '{step}' submission in progress",
            details={"session_id": session_id, "step": step},
        )


class IncompleteOrderError(SessionError):
    """Raised when completing an order without all step identifiers."""

    def __init__(self, session_id: str, missing: list[str]) -> None:
        super().__init__(
            f"Checkout session {session_id} cannot complete, missing: {missing}",
            details={"session_id": session_id, "missing": missing},
        )
