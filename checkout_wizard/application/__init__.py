"""Application layer module.

Contains the step processing service and the orchestrator that drives a
checkout session through the wizard.
"""

from checkout_wizard.application.checkout_orchestrator import (
    CheckoutOrchestrator,
    SessionRepository,
    StepGateway,
    StepOutcome,
    get_checkout_orchestrator,
    get_session_repository,
)
from checkout_wizard.application.step_service import (
    StepService,
    get_step_service,
)

__all__ = [
    "CheckoutOrchestrator",
    "SessionRepository",
    "StepGateway",
    "StepOutcome",
    "get_checkout_orchestrator",
    "get_session_repository",
    "StepService",
    "get_step_service",
]
