"""Admin request management: list, detail, quotation, invoice, cancel."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from journey_forward.admin.dependencies import get_current_admin
from journey_forward.booking.lifecycle import BookingService
from journey_forward.booking.status import RequestStatus
from journey_forward.dependencies import get_booking_service
from journey_forward.schemas.booking import (
    RequestList,
    RequestOut,
    RequestSummary,
    TransitionResponse,
    transition_response,
)
from journey_forward.schemas.quotation import InvoiceCreate, QuotationCreate

router = APIRouter(
    prefix="/api/v1/admin/requests",
    tags=["admin-requests"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=RequestList)
async def list_requests(
    status: Optional[RequestStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: BookingService = Depends(get_booking_service),
) -> RequestList:
    requests, total = await service.list(
        status=status.value if status else None, limit=limit, offset=offset
    )
    return RequestList(
        items=[RequestSummary.model_validate(r) for r in requests],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{request_id}", response_model=RequestOut)
async def get_request(
    request_id: int,
    service: BookingService = Depends(get_booking_service),
) -> RequestOut:
    return RequestOut.model_validate(await service.get(request_id))


@router.post("/{request_id}/quotation", response_model=TransitionResponse)
async def send_quotation(
    request_id: int,
    data: QuotationCreate,
    service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    """Price the request and email the customer their booking link."""
    return transition_response(await service.send_quotation(request_id, data))


@router.post("/{request_id}/invoice", response_model=TransitionResponse)
async def send_invoice(
    request_id: int,
    data: InvoiceCreate,
    service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    """Set the final amounts (after the job) and email the payment link."""
    return transition_response(await service.invoice(request_id, data))


@router.post("/{request_id}/cancel", response_model=TransitionResponse)
async def cancel_request(
    request_id: int,
    service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    return transition_response(await service.cancel(request_id))
