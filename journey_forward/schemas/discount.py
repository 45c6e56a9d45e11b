"""Discount code schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from journey_forward.models.discount import DiscountType


PERCENTAGE_OVER_100_MESSAGE = "Percentage discount cannot exceed 100"
EXPIRY_BEFORE_START_MESSAGE = "Expiry date must be after start date"


def _clean_code(v: str) -> str:
    return v.strip().upper()


class DiscountCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None
    type: DiscountType
    value: Decimal = Field(gt=0)
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return _clean_code(v)

    @model_validator(mode="after")
    def check_value(self) -> "DiscountCreate":
        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError(PERCENTAGE_OVER_100_MESSAGE)
        if self.starts_at and self.expires_at and self.expires_at < self.starts_at:
            raise ValueError(EXPIRY_BEFORE_START_MESSAGE)
        return self


class DiscountUpdate(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = None
    type: Optional[DiscountType] = None
    value: Optional[Decimal] = Field(default=None, gt=0)
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: Optional[str]) -> Optional[str]:
        return _clean_code(v) if v is not None else v


class DiscountOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    code: str
    description: Optional[str] = None
    type: str
    value: Decimal
    starts_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime


class DiscountPreviewRequest(BaseModel):
    code: str

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return _clean_code(v)


class DiscountPreview(BaseModel):
    """Result from the discount engine."""

    code: str
    type: str
    value: Decimal
    original_subtotal: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    tax: Decimal
    total: Decimal
