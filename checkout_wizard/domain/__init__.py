"""Domain layer - the checkout session, its step machine and validation.

- **Entities**: CheckoutSession, the aggregate for one checkout attempt
- **Value Objects**: step field records, step outcomes, order summary
- **State Machine**: CheckoutStep (account -> shipping -> payment -> complete)
- **Validation**: StepValidator and the simulated failure policies
- **Domain Events**: what happened to a session, for the audit log
- **Exceptions**: invalid transitions and session errors

Example usage:
    from checkout_wizard.domain import AccountFields, CheckoutSession, StepValidator

    session = CheckoutSession.create()
    fields = AccountFields(email="user@test.com", password="password123")
    if StepValidator().validate_account(fields) is None:
        session.accept_account(fields, "acc_1")
"""

from checkout_wizard.domain.base import AggregateRoot, DomainEvent, ValueObject
from checkout_wizard.domain.entities import AuditEntry, CheckoutSession
from checkout_wizard.domain.events import (
    EVENT_REGISTRY,
    OrderCompleted,
    SessionStarted,
    StepAccepted,
    StepRejected,
    StepReverted,
)
from checkout_wizard.domain.exceptions import (
    DomainError,
    IncompleteOrderError,
    InvalidStepTransitionError,
    SessionError,
    SessionNotFoundError,
    SubmissionInProgressError,
)
from checkout_wizard.domain.failure_policy import (
    DemoSentinelPolicy,
    NoSimulatedFailures,
    SimulatedFailurePolicy,
)
from checkout_wizard.domain.state_machines import (
    STEP_LABELS,
    CheckoutStep,
    validate_step_transition,
)
from checkout_wizard.domain.validation import StepValidator
from checkout_wizard.domain.value_objects import (
    DEMO_ORDER_SUMMARY,
    AccountFields,
    CompletionRequest,
    CompletionResult,
    OrderConfirmation,
    OrderLineItem,
    OrderSummary,
    PaymentFields,
    SessionId,
    ShippingFields,
    ShippingMethod,
    StepSubmissionResult,
)

__all__ = [
    # Base
    "AggregateRoot",
    "DomainEvent",
    "ValueObject",
    # Entities
    "AuditEntry",
    "CheckoutSession",
    # Events
    "EVENT_REGISTRY",
    "OrderCompleted",
    "SessionStarted",
    "StepAccepted",
    "StepRejected",
    "StepReverted",
    # Exceptions
    "DomainError",
    "IncompleteOrderError",
    "InvalidStepTransitionError",
    "SessionError",
    "SessionNotFoundError",
    "SubmissionInProgressError",
    # Validation
    "DemoSentinelPolicy",
    "NoSimulatedFailures",
    "SimulatedFailurePolicy",
    "StepValidator",
    # State machine
    "STEP_LABELS",
    "CheckoutStep",
    "validate_step_transition",
    # Value objects
    "DEMO_ORDER_SUMMARY",
    "AccountFields",
    "CompletionRequest",
    "CompletionResult",
    "OrderConfirmation",
    "OrderLineItem",
    "OrderSummary",
    "PaymentFields",
    "SessionId",
    "ShippingFields",
    "ShippingMethod",
    "StepSubmissionResult",
]
