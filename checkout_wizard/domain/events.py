"""Domain events for the checkout wizard.

Recorded by the checkout session as it moves through the wizard and
collected by the orchestrator for the audit log.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from checkout_wizard.domain.base import DomainEvent


@dataclass(frozen=True)
class SessionStarted(DomainEvent):
    """Event raised when a checkout attempt begins."""

    event_type: ClassVar[str] = "checkout.started"

    session_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"session_id": self.session_id}


@dataclass(frozen=True)
class StepAccepted(DomainEvent):
    """Event raised when a step's input is accepted."""

    event_type: ClassVar[str] = "checkout.step_accepted"

    session_id: str = ""
    step: str = ""
    identifier: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "step": self.step,
            "identifier": self.identifier,
        }


@dataclass(frozen=True)
class StepRejected(DomainEvent):
    """Event raised when a step's input, or the completion call, fails."""

    event_type: ClassVar[str] = "checkout.step_rejected"

    session_id: str = ""
    step: str = ""
    reason: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "step": self.step,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class StepReverted(DomainEvent):
    """Event raised when the user goes back a step."""

    event_type: ClassVar[str] = "checkout.step_reverted"

    session_id: str = ""
    from_step: str = ""
    to_step: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "from_step": self.from_step,
            "to_step": self.to_step,
        }


@dataclass(frozen=True)
class OrderCompleted(DomainEvent):
    """Event raised when the order is completed."""

    event_type: ClassVar[str] = "checkout.order_completed"

    session_id: str = ""
    order_id: str = ""
    total: str = ""
    currency: str = "USD"

    def _payload(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "order_id": self.order_id,
            "total": self.total,
            "currency": self.currency,
        }


EVENT_REGISTRY: dict[str, type[DomainEvent]] = {
    event.event_type: event
    for event in (SessionStarted, StepAccepted, StepRejected, StepReverted, OrderCompleted)
}
