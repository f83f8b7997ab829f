"""Checkout wizard main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from checkout_wizard.api.checkout import router as checkout_router
from checkout_wizard.api.health import router as health_router
from checkout_wizard.api.middleware import setup_middleware
from checkout_wizard.api.sessions import router as sessions_router
from checkout_wizard.domain.exceptions import (
    DomainError,
    InvalidStepTransitionError,
    SessionNotFoundError,
    SubmissionInProgressError,
)
from checkout_wizard.infrastructure.config import settings
from checkout_wizard.infrastructure.logging_config import configure_logging

logger = structlog.get_logger()

MALFORMED_REQUEST = "MALFORMED_REQUEST"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging()

    logger.info(
        "Starting checkout wizard",
        version=settings.api_version,
        debug=settings.debug,
        simulated_latency=settings.simulated_latency_enabled,
        simulated_failures=settings.simulated_failures_enabled,
    )

    yield

    logger.info("Shutting down checkout wizard")


app = FastAPI(
    title="Checkout Wizard API",
    description="Multi-step checkout: account, shipping, payment, completion",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(checkout_router)
app.include_router(sessions_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    """Build an error response in the standard shape."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "errorCode": error_code,
            "details": details or {},
            "requestId": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details")
    else:
        error_code = "ERROR"
        message = str(detail)
        details = None

    return error_response(request, exc.status_code, error_code, message, details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject bodies that cannot be decoded into a step form.

    Missing fields are not decode failures; those reach the step
    validator and come back as step rejections.
    """
    logger.warning(
        "Malformed request body",
        path=request.url.path,
        errors=[error.get("msg") for error in exc.errors()],
    )
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        MALFORMED_REQUEST,
        "Malformed request body",
    )


_DOMAIN_ERROR_STATUS: dict[type[DomainError], tuple[int, str]] = {
    SessionNotFoundError: (status.HTTP_404_NOT_FOUND, "SESSION_NOT_FOUND"),
    SubmissionInProgressError: (status.HTTP_409_CONFLICT, "SUBMISSION_IN_PROGRESS"),
    InvalidStepTransitionError: (status.HTTP_409_CONFLICT, "INVALID_STEP_TRANSITION"),
}


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to HTTP status codes."""
    status_code, error_code = _DOMAIN_ERROR_STATUS.get(
        type(exc), (status.HTTP_400_BAD_REQUEST, "DOMAIN_ERROR")
    )
    logger.warning(
        "Checkout request refused",
        path=request.url.path,
        error_code=error_code,
        error=exc.message,
    )
    return error_response(request, status_code, error_code, exc.message, exc.details)


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "checkout_wizard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
