"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from checkout_wizard.api.checkout import router as checkout_router
from checkout_wizard.api.health import router as health_router
from checkout_wizard.api.sessions import router as sessions_router

__all__ = [
    "checkout_router",
    "health_router",
    "sessions_router",
]
