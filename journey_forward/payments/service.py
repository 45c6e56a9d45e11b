"""Payment flows: card registration, final charge and webhook handling."""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

import structlog

from journey_forward.booking.lifecycle import BookingService
from journey_forward.booking.status import RequestStatus
from journey_forward.errors import ValidationError
from journey_forward.models.payment import (
    PAYMENT_AUTHORIZED,
    PAYMENT_PENDING,
    PAYMENT_REQUIRES_CONFIRMATION,
    PAYMENT_SUCCEEDED,
)
from journey_forward.payments.gateway import IntentInfo

logger = structlog.get_logger()

CARD_STATUSES = {RequestStatus.QUOTED.value, RequestStatus.CONFIRMED.value}


class PaymentOutcome(NamedTuple):
    intent: IntentInfo
    warnings: list[str]


class PaymentService:
    """Stripe-backed payment steps for a booking, keyed by booking token."""

    def __init__(self, booking: BookingService):
        self.booking = booking
        self.db = booking.db
        self.gateway = booking.gateway
        self.requests = booking.requests

    async def create_setup_intent(self, token: str) -> IntentInfo:
        """Start saving the customer's card for the final and fee charges."""
        request = await self.booking.get_by_token(token)
        if request.status not in CARD_STATUSES:
            raise ValidationError("A card can only be registered before the booking is invoiced.")

        payment = await self.requests.get_or_create_payment(
            request, self.booking.config.default_currency
        )
        metadata = {"requestId": str(request.id)}
        if not payment.stripe_customer_id:
            payment.stripe_customer_id = await self.gateway.create_customer(
                email=request.customer.email,
                name=request.customer.full_name,
                metadata=metadata,
            )
            payment.status = PAYMENT_PENDING

        intent = await self.gateway.create_setup_intent(payment.stripe_customer_id, metadata)
        await self.db.commit()

        logger.info("setup_intent_created", request_id=request.id, intent_id=intent.id)
        return intent

    async def create_payment_intent(self, token: str) -> IntentInfo:
        """Prepare the invoiced charge on the saved card."""
        request = await self.booking.get_by_token(token)
        if request.status != RequestStatus.INVOICED.value:
            raise ValidationError("This booking is not ready for payment.")

        payment = request.payment
        if payment is None or payment.total is None:
            raise ValidationError("This booking is not ready for payment.")
        if not payment.stripe_customer_id or not payment.payment_method:
            raise ValidationError("No saved payment method for this booking.")

        intent = await self.gateway.create_payment_intent(
            amount=payment.total,
            currency=payment.currency,
            customer_id=payment.stripe_customer_id,
            payment_method=payment.payment_method,
            metadata={"requestId": str(request.id)},
        )
        payment.stripe_payment_intent_id = intent.id
        payment.status = PAYMENT_REQUIRES_CONFIRMATION
        await self.db.commit()

        logger.info("payment_intent_created", request_id=request.id, intent_id=intent.id)
        return intent

    async def confirm_payment(self, token: str, intent_id: str) -> PaymentOutcome:
        """Confirm the intent and mirror its status; success marks the request PAID."""
        request = await self.booking.get_by_token(token)
        payment = request.payment
        if payment is None or payment.stripe_payment_intent_id != intent_id:
            raise ValidationError("Payment does not belong to this booking.")

        intent = await self.gateway.confirm_payment_intent(intent_id)
        payment.status = intent.status.upper()
        await self.db.commit()

        logger.info(
            "payment_intent_confirmed",
            request_id=request.id,
            intent_id=intent_id,
            status=payment.status,
        )

        warnings: list[str] = []
        if payment.status == PAYMENT_SUCCEEDED:
            result = await self.booking.mark_paid(request.id, intent_id)
            warnings = result.warnings
        return PaymentOutcome(intent, warnings)

    async def handle_event(self, event: Any) -> Optional[str]:
        """Apply a verified webhook event. Returns the handled event type."""
        event_type = event["type"]
        obj = event["data"]["object"]

        if event_type == "setup_intent.succeeded":
            await self._on_setup_succeeded(obj)
        elif event_type == "payment_intent.succeeded":
            await self._on_payment_succeeded(obj)
        elif event_type == "payment_intent.payment_failed":
            await self._on_payment_failed(obj)
        else:
            logger.debug("webhook_event_ignored", event_type=event_type)
            return None

        logger.info("webhook_event_handled", event_type=event_type, object_id=obj["id"])
        return event_type

    @staticmethod
    def _request_id(obj: Any) -> Optional[int]:
        metadata = obj["metadata"] if "metadata" in obj else None
        if not metadata or "requestId" not in metadata:
            return None
        return int(metadata["requestId"])

    async def _on_setup_succeeded(self, obj: Any) -> None:
        request_id = self._request_id(obj)
        if request_id is None:
            logger.warning("webhook_missing_request_id", object_id=obj["id"])
            return

        request = await self.booking.get(request_id)
        payment = await self.requests.get_or_create_payment(
            request, self.booking.config.default_currency
        )
        payment.stripe_customer_id = obj["customer"]
        payment.payment_method = obj["payment_method"]
        payment.status = PAYMENT_AUTHORIZED
        await self.db.commit()

        logger.info("card_authorized", request_id=request_id)

    async def _on_payment_succeeded(self, obj: Any) -> None:
        payment = await self.requests.get_payment_by_intent(obj["id"])
        request_id = payment.request_id if payment else self._request_id(obj)
        if request_id is None:
            logger.warning("webhook_payment_unmatched", intent_id=obj["id"])
            return

        request = await self.booking.get(request_id)
        if request.status in (RequestStatus.INVOICED.value, RequestStatus.PAID.value):
            await self.booking.mark_paid(request_id, obj["id"])
        else:
            # Cancellation fee charges keep their own payment status
            logger.info("webhook_payment_not_invoice", request_id=request_id, status=request.status)

    async def _on_payment_failed(self, obj: Any) -> None:
        payment = await self.requests.get_payment_by_intent(obj["id"])
        if payment is None:
            logger.warning("webhook_payment_unmatched", intent_id=obj["id"])
            return

        payment.status = str(obj["status"]).upper()
        await self.db.commit()
        logger.warning("payment_failed", request_id=payment.request_id, status=payment.status)
