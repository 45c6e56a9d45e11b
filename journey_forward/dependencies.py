"""FastAPI dependencies for clients built at startup."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.booking.lifecycle import BookingService
from journey_forward.database import get_db
from journey_forward.notifications.email import EmailNotifier
from journey_forward.payments.gateway import PaymentGateway
from journey_forward.payments.service import PaymentService
from journey_forward.uploads.storage import ImageStorage


def get_notifier(request: Request) -> EmailNotifier:
    return request.app.state.notifier


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage


def get_booking_service(
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> BookingService:
    return BookingService(db, notifier, gateway)


def get_payment_service(
    booking: BookingService = Depends(get_booking_service),
) -> PaymentService:
    return PaymentService(booking)
