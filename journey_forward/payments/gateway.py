"""Stripe gateway: async wrapper around the synchronous Stripe SDK."""

from __future__ import annotations

import asyncio
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, NamedTuple, Optional

import stripe
import structlog

from journey_forward.errors import PaymentError, ValidationError

logger = structlog.get_logger()


class IntentInfo(NamedTuple):
    id: str
    status: str
    client_secret: Optional[str] = None


def to_minor_units(amount: Decimal) -> int:
    """70.56 -> 7056."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway:
    """Creates customers and intents on Stripe and verifies webhooks."""

    def __init__(self, api_key: str, webhook_secret: str = ""):
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    async def _call(self, operation: str, fn, **params: Any):
        if not self.api_key:
            raise PaymentError("Payments are not configured")
        try:
            # Stripe SDK is synchronous, run in thread pool
            return await asyncio.to_thread(fn, api_key=self.api_key, **params)
        except stripe.StripeError as e:
            logger.error("stripe_call_failed", operation=operation, error=str(e))
            raise PaymentError(f"Payment processor error: {e.user_message or 'request failed'}")

    async def create_customer(
        self, email: str, name: str, metadata: Optional[dict] = None
    ) -> str:
        customer = await self._call(
            "create_customer",
            stripe.Customer.create,
            email=email,
            name=name,
            metadata=metadata or {},
        )
        logger.info("stripe_customer_created", customer_id=customer.id)
        return customer.id

    async def create_setup_intent(self, customer_id: str, metadata: dict) -> IntentInfo:
        """Save a card for later off-session charges."""
        intent = await self._call(
            "create_setup_intent",
            stripe.SetupIntent.create,
            customer=customer_id,
            usage="off_session",
            payment_method_types=["card"],
            metadata=metadata,
        )
        return IntentInfo(intent.id, intent.status, intent.client_secret)

    async def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        customer_id: str,
        payment_method: str,
        metadata: dict,
    ) -> IntentInfo:
        """Create (but do not confirm) an intent for the saved card."""
        intent = await self._call(
            "create_payment_intent",
            stripe.PaymentIntent.create,
            amount=to_minor_units(amount),
            currency=currency.lower(),
            customer=customer_id,
            payment_method=payment_method,
            automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
            confirm=False,
            metadata=metadata,
        )
        return IntentInfo(intent.id, intent.status, intent.client_secret)

    async def confirm_payment_intent(self, intent_id: str) -> IntentInfo:
        intent = await self._call(
            "confirm_payment_intent",
            stripe.PaymentIntent.confirm,
            intent=intent_id,
        )
        return IntentInfo(intent.id, intent.status, intent.client_secret)

    async def charge_off_session(
        self,
        amount: Decimal,
        currency: str,
        customer_id: str,
        payment_method: str,
        metadata: dict,
    ) -> IntentInfo:
        """Charge the saved card immediately (cancellation fee)."""
        intent = await self._call(
            "charge_off_session",
            stripe.PaymentIntent.create,
            amount=to_minor_units(amount),
            currency=currency.lower(),
            customer=customer_id,
            payment_method=payment_method,
            payment_method_types=["card"],
            off_session=True,
            confirm=True,
            metadata=metadata,
        )
        logger.info("stripe_off_session_charge", intent_id=intent.id, status=intent.status)
        return IntentInfo(intent.id, intent.status, intent.client_secret)

    def construct_event(self, payload: bytes, sig_header: Optional[str]) -> Any:
        """Verify a webhook payload signature and parse the event."""
        if not self.webhook_secret:
            raise PaymentError("Webhook secret not configured")
        if not sig_header:
            raise ValidationError("Missing stripe-signature header")
        try:
            return stripe.Webhook.construct_event(payload, sig_header, self.webhook_secret)
        except ValueError:
            raise ValidationError("Invalid payload")
        except stripe.SignatureVerificationError:
            raise ValidationError("Invalid signature")
