"""Checkout step API endpoints.

Provides the server side of each wizard step:
- POST /api/checkout/account - verify account details
- POST /api/checkout/shipping - verify shipping address
- POST /api/checkout/payment - process payment details
- POST /api/checkout/complete - complete the order
- GET /api/checkout/summary - order summary
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from checkout_wizard.api.schemas import (
    AccountRequest,
    AccountResponse,
    CompleteRequest,
    CompleteResponse,
    ErrorResponse,
    LineItemSchema,
    OrderSummaryResponse,
    PaymentRequest,
    PaymentResponse,
    ShippingRequest,
    ShippingResponse,
)
from checkout_wizard.application.step_service import StepService, get_step_service
from checkout_wizard.domain.value_objects import OrderSummary

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])

STEP_REJECTED = "STEP_REJECTED"

_REJECTION_RESPONSES = {400: {"model": ErrorResponse}}


# ============================================================================
# Dependencies
# ============================================================================


def get_service() -> StepService:
    """Get the step processing service."""
    return get_step_service()


# ============================================================================
# Converters
# ============================================================================


def rejection(reason: str | None) -> HTTPException:
    """Build the 400 response for a rejected step."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error_code": STEP_REJECTED, "message": reason or "Request rejected"},
    )


def summary_to_response(summary: OrderSummary) -> OrderSummaryResponse:
    """Convert OrderSummary to response schema."""
    return OrderSummaryResponse(
        subtotal=float(summary.subtotal),
        tax=float(summary.tax),
        shipping=float(summary.shipping),
        total=float(summary.total),
        currency=summary.currency,
        items=[
            LineItemSchema(
                id=item.id,
                name=item.name,
                price=float(item.price),
                quantity=item.quantity,
            )
            for item in summary.items
        ],
        discount_code=summary.discount_code,
        discount=float(summary.discount) if summary.discount is not None else None,
        discounted_total=(
            float(summary.discounted_total) if summary.discounted_total is not None else None
        ),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/account",
    response_model=AccountResponse,
    responses=_REJECTION_RESPONSES,
    summary="Verify account details",
)
async def submit_account(
    request: AccountRequest,
    service: Annotated[StepService, Depends(get_service)],
) -> AccountResponse:
    """Validate the account step and mint an account id.

    Raises:
        HTTPException: 400 with the rejection message.
    """
    result = await service.submit_account(request.to_fields())
    if result.rejected:
        raise rejection(result.reason)
    return AccountResponse(message=result.message, account_id=result.identifier)


@router.post(
    "/shipping",
    response_model=ShippingResponse,
    responses=_REJECTION_RESPONSES,
    summary="Verify shipping address",
)
async def submit_shipping(
    request: ShippingRequest,
    service: Annotated[StepService, Depends(get_service)],
) -> ShippingResponse:
    result = await service.submit_shipping(request.to_fields())
    if result.rejected:
        raise rejection(result.reason)
    return ShippingResponse(message=result.message, shipping_id=result.identifier)


@router.post(
    "/payment",
    response_model=PaymentResponse,
    responses=_REJECTION_RESPONSES,
    summary="Process payment details",
)
async def submit_payment(
    request: PaymentRequest,
    service: Annotated[StepService, Depends(get_service)],
) -> PaymentResponse:
    result = await service.submit_payment(request.to_fields())
    if result.rejected:
        raise rejection(result.reason)
    return PaymentResponse(message=result.message, payment_id=result.identifier)


@router.post(
    "/complete",
    response_model=CompleteResponse,
    responses=_REJECTION_RESPONSES,
    summary="Complete the order",
)
async def complete_order(
    request: CompleteRequest,
    service: Annotated[StepService, Depends(get_service)],
) -> CompleteResponse:
    """Complete the order from the account, shipping and payment ids.

    Raises:
        HTTPException: 400 if any id is missing.
    """
    result = await service.complete_order(request.to_request())
    if not result.accepted:
        raise rejection(result.reason)

    confirmation = result.confirmation
    return CompleteResponse(
        message=confirmation.message,
        order_id=confirmation.order_id,
        total=float(confirmation.total),
        currency=confirmation.currency,
        estimated_delivery=confirmation.estimated_delivery,
    )


@router.get(
    "/summary",
    response_model=OrderSummaryResponse,
    response_model_exclude_none=True,
    summary="Get order summary",
)
async def get_summary(
    service: Annotated[StepService, Depends(get_service)],
    discount_code: Annotated[str | None, Query(alias="discountCode")] = None,
) -> OrderSummaryResponse:
    """Return the order summary, with a discount code applied if given."""
    summary = await service.get_summary(discount_code)
    return summary_to_response(summary)
