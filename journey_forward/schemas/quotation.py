"""Quotation and invoice amount schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

AMOUNT_TOLERANCE = Decimal("0.01")


class Amounts(BaseModel):
    subtotal: Decimal = Field(ge=0)
    tax: Decimal = Field(ge=0)
    total: Decimal = Field(ge=0)

    @model_validator(mode="after")
    def check_total(self):
        if abs(self.subtotal + self.tax - self.total) > AMOUNT_TOLERANCE:
            raise ValueError("Total must equal subtotal + tax")
        return self


class QuotationCreate(Amounts):
    note: Optional[str] = None


class InvoiceCreate(Amounts):
    currency: str = Field(default="CAD", min_length=3, max_length=3)
    discount_code: Optional[str] = None
