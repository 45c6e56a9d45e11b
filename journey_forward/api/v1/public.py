"""Public API: health, service-area check and request submission."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder

from journey_forward.booking.lifecycle import BookingService
from journey_forward.booking.service_area import check_service_area
from journey_forward.dependencies import get_booking_service
from journey_forward.errors import ValidationError
from journey_forward.schemas.booking import (
    AvailabilityCheck,
    AvailabilityResult,
    BookingCreate,
    LegacyBookingAck,
    TransitionResponse,
    transition_response,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["public"])
legacy_router = APIRouter(prefix="/api", tags=["legacy"])

LEGACY_REQUIRED_FIELDS = ("serviceType", "address", "dateTime")


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/availability", response_model=AvailabilityResult)
async def check_availability(data: AvailabilityCheck) -> AvailabilityResult:
    """Tell the booking form whether a postal code is served."""
    result = check_service_area(data.postal_code)
    logger.info("availability_checked", postal_code=result.postal_code, ok=result.ok)
    return AvailabilityResult(ok=result.ok, postal_code=result.postal_code, reason=result.reason)


@router.post("/requests", response_model=TransitionResponse, status_code=201)
async def submit_request(
    data: BookingCreate,
    service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    """Submit a pickup request. Starts in RECEIVED."""
    return transition_response(await service.submit(data))


@legacy_router.post("/booking", response_model=LegacyBookingAck)
async def legacy_booking(request: Request) -> LegacyBookingAck:
    """Older booking form endpoint: checks the payload shape and echoes it.

    Nothing is stored; new clients use ``POST /api/v1/requests``.
    """
    try:
        data: Any = await request.json()
    except ValueError:
        raise ValidationError("Missing required fields")

    if not isinstance(data, dict):
        raise ValidationError("Missing required fields")
    missing = [f for f in LEGACY_REQUIRED_FIELDS if not data.get(f)]
    if missing or not isinstance(data.get("items"), list):
        raise ValidationError("Missing required fields")

    logger.info("legacy_booking_received", service_type=data["serviceType"])
    return LegacyBookingAck(message="Booking received!", received=jsonable_encoder(data))
