"""Checkout session API endpoints.

Runs the wizard on the server, one session per checkout attempt:
- POST /api/sessions - start a session on the account step
- GET /api/sessions/{id} - current state of the session
- POST /api/sessions/{id}/account - submit the account step
- POST /api/sessions/{id}/shipping - submit the shipping step
- POST /api/sessions/{id}/payment - submit payment and complete the order
- POST /api/sessions/{id}/back - return to the previous step
- DELETE /api/sessions/{id} - abandon the session

Wrong-step submissions and unknown sessions surface as domain errors and
are turned into 409/404 responses by the application's exception handler.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from checkout_wizard.api.schemas import (
    AccountDataSchema,
    AccountRequest,
    AuditEntrySchema,
    ConfirmationSchema,
    ErrorResponse,
    PaymentDataSchema,
    PaymentRequest,
    SessionResponse,
    SessionStepResponse,
    ShippingDataSchema,
    ShippingRequest,
)
from checkout_wizard.application.checkout_orchestrator import (
    CheckoutOrchestrator,
    StepOutcome,
    get_checkout_orchestrator,
)
from checkout_wizard.domain.entities import CheckoutSession
from checkout_wizard.domain.state_machines import STEP_LABELS

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])

_SESSION_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_orchestrator(request: Request) -> CheckoutOrchestrator:
    """Get checkout orchestrator with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_checkout_orchestrator(request_id=request_id)


# ============================================================================
# Converters
# ============================================================================


def session_to_response(session: CheckoutSession) -> SessionResponse:
    """Convert CheckoutSession entity to response schema."""
    account_data = None
    if session.account_data:
        account_data = AccountDataSchema(email=session.account_data.email)

    shipping_data = None
    if session.shipping_data:
        sd = session.shipping_data
        shipping_data = ShippingDataSchema(
            address_line1=sd.address_line1,
            street_name=sd.street_name,
            postcode=sd.postcode,
            shipping_method=sd.shipping_method,
        )

    payment_data = None
    if session.payment_data:
        pd = session.payment_data
        payment_data = PaymentDataSchema(
            name_on_card=pd.name_on_card,
            card_number=pd.masked_card_number,
            expiration_month=pd.expiration_month,
            expiration_year=pd.expiration_year,
        )

    confirmation = None
    if session.confirmation:
        c = session.confirmation
        confirmation = ConfirmationSchema(
            order_id=c.order_id,
            total=float(c.total),
            currency=c.currency,
            estimated_delivery=c.estimated_delivery,
            message=c.message,
        )

    audit_trail = [
        AuditEntrySchema(
            timestamp=entry.timestamp,
            action=entry.action,
            from_step=entry.from_step,
            to_step=entry.to_step,
            details=dict(entry.details) if entry.details else None,
        )
        for entry in session.audit_trail
    ]

    return SessionResponse(
        id=str(session.id),
        current_step=session.current_step.value,
        step_index=session.current_step.position,
        steps=STEP_LABELS,
        account_data=account_data,
        shipping_data=shipping_data,
        payment_data=payment_data,
        account_id=session.account_id,
        shipping_id=session.shipping_id,
        payment_id=session.payment_id,
        order_id=session.order_id,
        confirmation=confirmation,
        last_error=session.last_error,
        is_submitting=session.is_submitting,
        audit_trail=audit_trail,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )


def outcome_to_response(outcome: StepOutcome) -> SessionStepResponse:
    return SessionStepResponse(
        accepted=outcome.accepted,
        error=outcome.error,
        identifier=outcome.identifier,
        session=session_to_response(outcome.session),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start checkout session",
)
async def create_session(
    orchestrator: Annotated[CheckoutOrchestrator, Depends(get_orchestrator)],
) -> SessionResponse:
    """Start a new checkout session on the account step."""
    session = orchestrator.start()
    return session_to_response(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    responses=_SESSION_ERRORS,
    summary="Get checkout session",
)
async def get_session(
    session_id: str,
    orchestrator: Annotated[CheckoutOrchestrator, Depends(get_orchestrator)],
) -> SessionResponse:
    return session_to_response(orchestrator.get_session(session_id))


@router.post(
    "/{session_id}/account",
    response_model=SessionStepResponse,
    responses=_SESSION_ERRORS,
    summary="Submit account step",
)
async def submit_account(
    session_id: str,
    request: AccountRequest,
    orchestrator: Annotated[CheckoutOrchestrator, Depends(get_orchestrator)],
) -> SessionStepResponse:
    """Submit the account step.

    Both acceptance and rejection return 200; check ``accepted``.

    Raises:
        SessionNotFoundError: 404 if the session does not exist.
        InvalidStepTransitionError: 409 if the session is not on account.
        SubmissionInProgressError: 409 if a submission is pending.
    """
    session = orchestrator.get_session(session_id)
    outcome = await orchestrator.submit_account(session, request.to_fields())
    return outcome_to_response(outcome)


@router.post(
    "/{session_id}/shipping",
    response_model=SessionStepResponse,
    responses=_SESSION_ERRORS,
    summary="Submit shipping step",
)
async def submit_shipping(
    session_id: str,
    request: ShippingRequest,
    orchestrator: Annotated[CheckoutOrchestrator, Depends(get_orchestrator)],
) -> SessionStepResponse:
    session = orchestrator.get_session(session_id)
    outcome = await orchestrator.submit_shipping(session, request.to_fields())
    return outcome_to_response(outcome)


@router.post(
    "/{session_id}/payment",
    response_model=SessionStepResponse,
    responses=_SESSION_ERRORS,
    summary="Submit payment step and complete order",
)
async def submit_payment(
    session_id: str,
    request: PaymentRequest,
    orchestrator: Annotated[CheckoutOrchestrator, Depends(get_orchestrator)],
) -> SessionStepResponse:
    """Submit payment; an accepted payment completes the order."""
    session = orchestrator.get_session(session_id)
    outcome = await orchestrator.submit_payment(session, request.to_fields())
    return outcome_to_response(outcome)


@router.post(
    "/{session_id}/back",
    response_model=SessionResponse,
    responses=_SESSION_ERRORS,
    summary="Go back one step",
)
async def go_back(
    session_id: str,
    orchestrator: Annotated[CheckoutOrchestrator, Depends(get_orchestrator)],
) -> SessionResponse:
    session = orchestrator.get_session(session_id)
    return session_to_response(orchestrator.go_back(session))


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Abandon checkout session",
)
async def abandon_session(
    session_id: str,
    orchestrator: Annotated[CheckoutOrchestrator, Depends(get_orchestrator)],
) -> Response:
    orchestrator.abandon(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
