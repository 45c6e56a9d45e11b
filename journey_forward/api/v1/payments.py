"""Payments API: card registration, final charge and Stripe webhook."""

import structlog
from fastapi import APIRouter, Depends, Header, Request

from journey_forward.dependencies import get_payment_gateway, get_payment_service
from journey_forward.payments.gateway import PaymentGateway
from journey_forward.payments.service import PaymentService
from journey_forward.schemas.payment import (
    IntentResponse,
    PaymentConfirm,
    PaymentIntentCreate,
    SetupIntentCreate,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post("/setup-intent", response_model=IntentResponse)
async def create_setup_intent(
    data: SetupIntentCreate,
    service: PaymentService = Depends(get_payment_service),
) -> IntentResponse:
    intent = await service.create_setup_intent(data.token)
    return IntentResponse(
        intent_id=intent.id, status=intent.status, client_secret=intent.client_secret
    )


@router.post("/payment-intent", response_model=IntentResponse)
async def create_payment_intent(
    data: PaymentIntentCreate,
    service: PaymentService = Depends(get_payment_service),
) -> IntentResponse:
    intent = await service.create_payment_intent(data.token)
    return IntentResponse(
        intent_id=intent.id, status=intent.status, client_secret=intent.client_secret
    )


@router.post("/confirm", response_model=IntentResponse)
async def confirm_payment(
    data: PaymentConfirm,
    service: PaymentService = Depends(get_payment_service),
) -> IntentResponse:
    intent, warnings = await service.confirm_payment(data.token, data.payment_intent_id)
    return IntentResponse(
        intent_id=intent.id,
        status=intent.status.upper(),
        client_secret=intent.client_secret,
        warnings=warnings,
    )


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    service: PaymentService = Depends(get_payment_service),
):
    """Receive Stripe events.

    The raw body is verified against ``stripe-signature`` before any
    state changes.
    """
    payload = await request.body()
    event = gateway.construct_event(payload, stripe_signature)
    handled = await service.handle_event(event)
    return {"received": True, "handled": handled is not None}
