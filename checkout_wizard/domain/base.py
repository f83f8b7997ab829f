"""Domain building blocks.

Frozen value records, the aggregate root that a checkout session is built
on, and the event type sessions emit as they move through the wizard.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID, uuid4

ID = TypeVar("ID")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable record compared field by field."""


@dataclass(kw_only=True)
class AggregateRoot(ABC, Generic[ID]):
    """Identity plus bookkeeping for a consistency boundary.

    Every state change goes through ``_touch`` so ``updated_at`` tells how
    long the aggregate has been idle. Events pile up until the caller
    collects them.

    Attributes:
        id: Aggregate identity.
        version: Bumped on every state change.
        created_at: When the aggregate was created.
        updated_at: When it last changed.
    """

    id: ID
    version: int = field(default=1, compare=False)
    created_at: datetime = field(default_factory=_utcnow, compare=False)
    updated_at: datetime = field(default_factory=_utcnow, compare=False)
    _events: list["DomainEvent"] = field(
        default_factory=list, init=False, repr=False, compare=False
    )

    def collect_events(self) -> list["DomainEvent"]:
        """Hand over the pending events and forget them."""
        events, self._events = self._events, []
        return events

    def _record_event(self, event: "DomainEvent") -> None:
        self._events.append(event)

    def _touch(self) -> None:
        self.updated_at = _utcnow()
        self.version += 1


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Something that happened to an aggregate.

    Subclasses set ``event_type`` and add their own fields, which
    ``_payload`` exposes for logging.
    """

    event_type: ClassVar[str]

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)
    aggregate_id: str = ""
    aggregate_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "payload": self._payload(),
        }

    @abstractmethod
    def _payload(self) -> dict[str, Any]: ...
