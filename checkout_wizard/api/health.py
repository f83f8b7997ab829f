"""Liveness and readiness endpoints."""

from fastapi import APIRouter

from checkout_wizard.api.schemas import CamelModel
from checkout_wizard.application.checkout_orchestrator import get_session_repository
from checkout_wizard.infrastructure.config import settings

SERVICE_NAME = "checkout-wizard"

router = APIRouter()


class HealthResponse(CamelModel):
    status: str
    service: str
    version: str


class ReadinessResponse(CamelModel):
    """Readiness plus the demo switches the wizard is running with."""

    status: str
    active_sessions: int
    simulated_latency: bool
    simulated_failures: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", service=SERVICE_NAME, version=settings.api_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Report readiness.

    Sessions are held in memory, so the service is ready as soon as it
    is up. ``activeSessions`` counts open, unexpired sessions.
    """
    return ReadinessResponse(
        status="ready",
        active_sessions=get_session_repository().count(),
        simulated_latency=settings.simulated_latency_enabled,
        simulated_failures=settings.simulated_failures_enabled,
    )
