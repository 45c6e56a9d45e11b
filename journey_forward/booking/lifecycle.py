"""Booking lifecycle service.

Every status change goes through ``ensure_transition`` and is committed
before notifications are sent. A failed email never rolls back the
status: it is logged by the notifier and returned in
``TransitionResult.warnings``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import NamedTuple, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.booking.cancellation import (
    calculate_fee,
    cancellation_deadline,
    is_valid_booking_date,
    pickup_has_passed,
)
from journey_forward.booking.service_area import check_service_area
from journey_forward.booking.status import RequestStatus, ensure_transition
from journey_forward.config import Settings, settings as default_settings
from journey_forward.discounts.engine import DiscountEngine
from journey_forward.errors import NotFoundError, ValidationError
from journey_forward.models.base import utcnow
from journey_forward.models.payment import (
    PAYMENT_CANCELLATION_FEE_CHARGED,
    PAYMENT_READY,
    PAYMENT_SUCCEEDED,
)
from journey_forward.models.request import Request
from journey_forward.notifications.email import EmailNotifier, NotificationEvent
from journey_forward.payments.gateway import PaymentGateway
from journey_forward.repositories.customer import CustomerRepository
from journey_forward.repositories.discount import DiscountRepository
from journey_forward.repositories.request import RequestRepository
from journey_forward.schemas.booking import BookingCreate
from journey_forward.schemas.discount import DiscountPreview
from journey_forward.schemas.quotation import InvoiceCreate, QuotationCreate

logger = structlog.get_logger()

MISSING_CARD_MESSAGE = "Cannot charge cancellation fee because payment information is missing."
PICKUP_PASSED_MESSAGE = "This booking can no longer be cancelled because the pickup time has passed."


class TransitionResult(NamedTuple):
    request: Request
    warnings: list[str]


class BookingService:
    """Customer and admin operations on a booking request."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: EmailNotifier,
        gateway: PaymentGateway,
        config: Optional[Settings] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.gateway = gateway
        self.config = config or default_settings
        self.requests = RequestRepository(db)
        self.customers = CustomerRepository(db)
        self.discounts = DiscountRepository(db)
        self.discount_engine = DiscountEngine(
            business_timezone=self.config.business_timezone,
            default_tax_rate=self.config.default_tax_rate,
        )

    # ─── Queries ─────────────────────────────────────────────

    async def get(self, request_id: int) -> Request:
        request = await self.requests.get(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    async def get_by_token(self, token: str) -> Request:
        request = await self.requests.get_by_token(token)
        if request is None:
            raise NotFoundError("Booking not found")
        return request

    async def list(
        self,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Request], int]:
        if status:
            status = RequestStatus(status.upper()).value
        return await self.requests.list(status=status, limit=limit, offset=offset)

    # ─── Helpers ─────────────────────────────────────────────

    def _transition(self, request: Request, target: RequestStatus) -> None:
        previous = request.status
        request.status = ensure_transition(previous, target).value
        logger.info(
            "status_transition",
            request_id=request.id,
            from_status=previous,
            to_status=request.status,
        )

    async def _commit_and_notify(
        self,
        request_id: int,
        event: NotificationEvent,
        **extra,
    ) -> TransitionResult:
        await self.db.commit()
        request = await self.get(request_id)
        warnings = await self.notifier.notify(event, request, **extra)
        return TransitionResult(request, warnings)

    # ─── Lifecycle ───────────────────────────────────────────

    async def submit(self, data: BookingCreate, now: Optional[datetime] = None) -> TransitionResult:
        """Validate and store a new pickup request (RECEIVED).

        Raises:
            ValidationError: outside the service area or too short notice
        """
        now = now or utcnow()

        pickup = check_service_area(data.pickup.postal_code)
        if not pickup.ok:
            raise ValidationError(pickup.reason)
        data.pickup.postal_code = pickup.postal_code

        if data.delivery_required and data.delivery is not None:
            delivery = check_service_area(data.delivery.postal_code)
            if not delivery.ok:
                raise ValidationError(delivery.reason)
            data.delivery.postal_code = delivery.postal_code

        lead_hours = self.config.minimum_booking_lead_hours
        if not is_valid_booking_date(data.preferred_datetime, now, lead_hours):
            raise ValidationError(
                f"Pickup must be scheduled at least {lead_hours} hours in advance."
            )

        customer = await self.customers.upsert(data.customer)
        deadline = cancellation_deadline(
            data.preferred_datetime, self.config.cancellation_hours_limit
        )
        request = await self.requests.create(customer, data, deadline)

        logger.info(
            "request_submitted",
            request_id=request.id,
            customer_id=customer.id,
            postal_code=pickup.postal_code,
        )
        return await self._commit_and_notify(request.id, NotificationEvent.BOOKING_RECEIVED)

    async def send_quotation(
        self,
        request_id: int,
        data: QuotationCreate,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """RECEIVED -> QUOTED, issuing the customer's booking token."""
        request = await self.get(request_id)
        self._transition(request, RequestStatus.QUOTED)

        await self.requests.add_quotation(
            request,
            subtotal=data.subtotal,
            tax=data.tax,
            total=data.total,
            note=data.note,
            sent_at=now or utcnow(),
        )
        return await self._commit_and_notify(request.id, NotificationEvent.QUOTATION_SENT)

    async def confirm(self, token: str) -> TransitionResult:
        """QUOTED -> CONFIRMED, from the customer's booking link."""
        request = await self.get_by_token(token)
        self._transition(request, RequestStatus.CONFIRMED)
        return await self._commit_and_notify(
            request.id,
            NotificationEvent.BOOKING_CONFIRMED,
            cancellation_fee=self.config.cancellation_fee,
            cancellation_hours=self.config.cancellation_hours_limit,
        )

    async def invoice(
        self,
        request_id: int,
        data: InvoiceCreate,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """CONFIRMED -> INVOICED with the final amounts, optionally discounted."""
        request = await self.get(request_id)
        ensure_transition(request.status, RequestStatus.INVOICED)

        subtotal, tax, total = data.subtotal, data.tax, data.total
        discount_amount: Optional[Decimal] = None
        discount_code_id: Optional[int] = None
        if data.discount_code:
            discount = self.discount_engine.check_validity(
                await self.discounts.get_by_code(data.discount_code), now or utcnow()
            )
            preview = self.discount_engine.apply(discount, subtotal, tax)
            subtotal, tax, total = preview.subtotal, preview.tax, preview.total
            discount_amount = preview.discount_amount
            discount_code_id = discount.id

        payment = await self.requests.get_or_create_payment(request, data.currency.upper())
        payment.subtotal = subtotal
        payment.tax = tax
        payment.total = total
        payment.discount_amount = discount_amount
        payment.discount_code_id = discount_code_id
        payment.currency = data.currency.upper()
        payment.status = PAYMENT_READY

        self._transition(request, RequestStatus.INVOICED)
        return await self._commit_and_notify(request.id, NotificationEvent.INVOICE_SENT)

    async def preview_discount(
        self,
        token: str,
        code: str,
        now: Optional[datetime] = None,
    ) -> DiscountPreview:
        """Show the customer what a code would take off their quotation."""
        request = await self.get_by_token(token)
        discount = self.discount_engine.check_validity(
            await self.discounts.get_by_code(code), now or utcnow()
        )
        quotation = request.quotation
        return self.discount_engine.apply(discount, quotation.subtotal, quotation.tax)

    async def mark_paid(self, request_id: int, intent_id: Optional[str] = None) -> TransitionResult:
        """INVOICED -> PAID. Repeated calls on a PAID request are no-ops."""
        request = await self.get(request_id)
        if request.status == RequestStatus.PAID.value:
            logger.info("request_already_paid", request_id=request_id)
            return TransitionResult(request, [])

        self._transition(request, RequestStatus.PAID)
        payment = await self.requests.get_or_create_payment(request, self.config.default_currency)
        payment.status = PAYMENT_SUCCEEDED
        if intent_id:
            payment.stripe_payment_intent_id = intent_id

        return await self._commit_and_notify(request.id, NotificationEvent.PAYMENT_CONFIRMED)

    async def cancel(self, request_id: int, now: Optional[datetime] = None) -> TransitionResult:
        request = await self.get(request_id)
        return await self._cancel(request, now or utcnow())

    async def cancel_by_token(self, token: str, now: Optional[datetime] = None) -> TransitionResult:
        request = await self.get_by_token(token)
        return await self._cancel(request, now or utcnow())

    async def _cancel(self, request: Request, now: datetime) -> TransitionResult:
        """Cancel free before the deadline, otherwise charge the saved card."""
        ensure_transition(request.status, RequestStatus.CANCELLED)
        if pickup_has_passed(request.preferred_datetime, now):
            raise ValidationError(PICKUP_PASSED_MESSAGE)

        fee = calculate_fee(
            request.preferred_datetime,
            now,
            self.config.cancellation_fee,
            self.config.cancellation_hours_limit,
        )

        if fee > 0:
            payment = request.payment
            if payment is None or not payment.stripe_customer_id or not payment.payment_method:
                raise ValidationError(MISSING_CARD_MESSAGE)

            intent = await self.gateway.charge_off_session(
                amount=fee,
                currency=payment.currency,
                customer_id=payment.stripe_customer_id,
                payment_method=payment.payment_method,
                metadata={"requestId": str(request.id), "type": "cancellation_fee"},
            )
            payment.stripe_payment_intent_id = intent.id
            payment.status = PAYMENT_CANCELLATION_FEE_CHARGED
            request.cancellation_fee = fee
        else:
            request.cancellation_fee = None

        self._transition(request, RequestStatus.CANCELLED)
        request.cancelled_at = now

        logger.info(
            "request_cancelled",
            request_id=request.id,
            fee=str(fee),
            charged=fee > 0,
        )
        return await self._commit_and_notify(
            request.id, NotificationEvent.BOOKING_CANCELLED, cancellation_fee=fee
        )
