"""Booking request schemas for the public and admin API."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class AvailabilityCheck(BaseModel):
    postal_code: str


class AvailabilityResult(BaseModel):
    ok: bool
    postal_code: str
    reason: Optional[str] = None


class AddressIn(BaseModel):
    postal_code: str
    address_line1: str = Field(min_length=1, max_length=255)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1, max_length=100)
    state: str = "BC"
    floor: Optional[int] = None
    elevator: Optional[bool] = None


class CustomerIn(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ItemIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    size: Literal["small", "medium", "large"] = "medium"
    quantity: int = Field(default=1, ge=1)
    photo_url: Optional[str] = None


class BookingCreate(BaseModel):
    """Customer pickup request submitted from the booking form."""

    customer: CustomerIn
    pickup: AddressIn
    delivery_required: bool = False
    delivery: Optional[AddressIn] = None
    preferred_datetime: datetime
    items: list[ItemIn] = Field(min_length=1)

    @model_validator(mode="after")
    def check_delivery(self) -> "BookingCreate":
        if self.delivery_required and self.delivery is None:
            raise ValueError("Delivery address is required when delivery is requested")
        return self


class CustomerOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None


class ItemOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    description: Optional[str] = None
    size: str
    quantity: int
    photo_url: Optional[str] = None


class QuotationOut(BaseModel):
    model_config = {"from_attributes": True}

    subtotal: Decimal
    tax: Decimal
    total: Decimal
    note: Optional[str] = None
    sent_at: Optional[datetime] = None


class PaymentOut(BaseModel):
    model_config = {"from_attributes": True}

    subtotal: Optional[Decimal] = None
    tax: Optional[Decimal] = None
    total: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    currency: str
    status: str
    payment_method: Optional[str] = None


class RequestOut(BaseModel):
    """Full request view shared by the admin detail page and the booking link."""

    model_config = {"from_attributes": True}

    id: int
    status: str
    customer: CustomerOut
    delivery_required: bool
    pickup_address: str
    delivery_address: Optional[str] = None
    pickup_floor: Optional[int] = None
    pickup_elevator: Optional[bool] = None
    delivery_floor: Optional[int] = None
    delivery_elevator: Optional[bool] = None
    preferred_datetime: datetime
    free_cancellation_deadline: datetime
    cancelled_at: Optional[datetime] = None
    cancellation_fee: Optional[Decimal] = None
    items: list[ItemOut] = []
    quotation: Optional[QuotationOut] = None
    payment: Optional[PaymentOut] = None
    created_at: datetime


class RequestSummary(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    status: str
    customer: CustomerOut
    pickup_address: str
    preferred_datetime: datetime
    created_at: datetime


class RequestList(BaseModel):
    items: list[RequestSummary]
    total: int
    limit: int
    offset: int


class TransitionResponse(BaseModel):
    """Result of a status change, with any notification failures."""

    request: RequestOut
    warnings: list[str] = []


class LegacyBookingAck(BaseModel):
    message: str
    received: dict


def transition_response(result) -> TransitionResponse:
    """Build the API response from a lifecycle ``TransitionResult``."""
    return TransitionResponse(
        request=RequestOut.model_validate(result.request),
        warnings=result.warnings,
    )
