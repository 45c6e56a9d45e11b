"""Request repository: booking requests with their items, quotation and payment."""

from __future__ import annotations

import secrets
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.booking.status import INITIAL_STATUS
from journey_forward.models.customer import Customer
from journey_forward.models.payment import Payment
from journey_forward.models.quotation import Quotation
from journey_forward.models.request import Item, Request
from journey_forward.schemas.booking import AddressIn, BookingCreate

logger = structlog.get_logger()


def new_booking_token() -> str:
    return secrets.token_urlsafe(32)


class RequestRepository:
    """Loads and persists requests. Callers own the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, request_id: int) -> Optional[Request]:
        stmt = (
            select(Request)
            .where(Request.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token(self, token: str) -> Optional[Request]:
        stmt = (
            select(Request)
            .join(Quotation, Quotation.request_id == Request.id)
            .where(Quotation.booking_token == token)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Request], int]:
        """Newest first, optionally filtered by status."""
        stmt = select(Request)
        count_stmt = select(func.count()).select_from(Request)
        if status:
            stmt = stmt.where(Request.status == status)
            count_stmt = count_stmt.where(Request.status == status)

        stmt = stmt.order_by(Request.created_at.desc(), Request.id.desc()).limit(limit).offset(offset)

        result = await self.db.execute(stmt)
        total = (await self.db.execute(count_stmt)).scalar_one()
        return list(result.scalars().all()), total

    async def create(
        self,
        customer: Customer,
        data: BookingCreate,
        free_cancellation_deadline: datetime,
    ) -> Request:
        """Create a RECEIVED request with its items."""
        request = Request(
            customer_id=customer.id,
            delivery_required=data.delivery_required,
            preferred_datetime=data.preferred_datetime,
            status=INITIAL_STATUS.value,
            free_cancellation_deadline=free_cancellation_deadline,
            **self._address_columns("pickup", data.pickup),
        )
        if data.delivery_required and data.delivery is not None:
            for column, value in self._address_columns("delivery", data.delivery).items():
                setattr(request, column, value)

        request.items = [
            Item(
                name=item.name,
                description=item.description,
                size=item.size,
                quantity=item.quantity,
                photo_url=item.photo_url,
            )
            for item in data.items
        ]

        self.db.add(request)
        await self.db.flush()

        logger.info(
            "request_created",
            request_id=request.id,
            customer_id=customer.id,
            items=len(data.items),
        )
        return request

    @staticmethod
    def _address_columns(prefix: str, address: AddressIn) -> dict:
        return {
            f"{prefix}_postal_code": address.postal_code,
            f"{prefix}_address_line1": address.address_line1,
            f"{prefix}_address_line2": address.address_line2,
            f"{prefix}_city": address.city,
            f"{prefix}_state": address.state,
            f"{prefix}_floor": address.floor,
            f"{prefix}_elevator": address.elevator,
        }

    async def add_quotation(
        self,
        request: Request,
        subtotal,
        tax,
        total,
        note: Optional[str],
        sent_at: datetime,
    ) -> Quotation:
        quotation = Quotation(
            request_id=request.id,
            subtotal=subtotal,
            tax=tax,
            total=total,
            booking_token=new_booking_token(),
            note=note,
            sent_at=sent_at,
        )
        self.db.add(quotation)
        await self.db.flush()

        logger.info("quotation_created", request_id=request.id, total=str(total))
        return quotation

    async def get_or_create_payment(self, request: Request, currency: str) -> Payment:
        """Return the request's single Payment row, creating a PENDING one."""
        result = await self.db.execute(
            select(Payment).where(Payment.request_id == request.id)
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            payment = Payment(request_id=request.id, currency=currency)
            self.db.add(payment)
            await self.db.flush()
            logger.info("payment_created", request_id=request.id)
        return payment

    async def get_payment_by_intent(self, intent_id: str) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment).where(Payment.stripe_payment_intent_id == intent_id)
        )
        return result.scalar_one_or_none()
