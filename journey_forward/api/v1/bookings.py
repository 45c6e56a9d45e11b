"""Customer booking-link API, addressed by the quotation's booking token."""

from fastapi import APIRouter, Depends

from journey_forward.booking.lifecycle import BookingService
from journey_forward.dependencies import get_booking_service
from journey_forward.schemas.booking import RequestOut, TransitionResponse, transition_response
from journey_forward.schemas.discount import DiscountPreview, DiscountPreviewRequest

router = APIRouter(prefix="/api/v1/bookings/token", tags=["bookings"])


@router.get("/{token}", response_model=RequestOut)
async def get_booking(
    token: str,
    service: BookingService = Depends(get_booking_service),
) -> RequestOut:
    return RequestOut.model_validate(await service.get_by_token(token))


@router.post("/{token}/confirm", response_model=TransitionResponse)
async def confirm_booking(
    token: str,
    service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    """Accept the quotation (QUOTED -> CONFIRMED)."""
    return transition_response(await service.confirm(token))


@router.post("/{token}/cancel", response_model=TransitionResponse)
async def cancel_booking(
    token: str,
    service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    """Cancel; a fee is charged to the saved card inside the fee window."""
    return transition_response(await service.cancel_by_token(token))


@router.post("/{token}/discount", response_model=DiscountPreview)
async def preview_discount(
    token: str,
    data: DiscountPreviewRequest,
    service: BookingService = Depends(get_booking_service),
) -> DiscountPreview:
    return await service.preview_discount(token, data.code)
