"""Quotation model: one priced offer per request."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from journey_forward.models.base import Base, IntIdMixin, TimestampMixin


class Quotation(Base, IntIdMixin, TimestampMixin):
    __tablename__ = "quotations"

    request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("requests.id"), unique=True, nullable=False
    )

    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Opaque token embedded in the customer's booking link
    booking_token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)

    # Mutable after creation
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    request = relationship("Request", back_populates="quotation")
