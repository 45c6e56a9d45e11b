"""Request (booking) and Item models."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from journey_forward.booking.status import INITIAL_STATUS
from journey_forward.models.base import Base, IntIdMixin, TimestampMixin


class Request(Base, IntIdMixin, TimestampMixin):
    __tablename__ = "requests"

    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("customers.id"), nullable=False, index=True
    )
    delivery_required: Mapped[bool] = mapped_column(Boolean, default=False)

    # Pickup address
    pickup_postal_code: Mapped[str] = mapped_column(String(10), nullable=False)
    pickup_address_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    pickup_address_line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    pickup_city: Mapped[str] = mapped_column(String(100), nullable=False)
    pickup_state: Mapped[str] = mapped_column(String(50), default="BC")
    pickup_floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    pickup_elevator: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    # Delivery address (only when delivery_required)
    delivery_postal_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    delivery_address_line1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    delivery_address_line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    delivery_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    delivery_state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    delivery_floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    delivery_elevator: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    preferred_datetime: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(20), default=INITIAL_STATUS.value, nullable=False, index=True
    )  # RECEIVED|QUOTED|CONFIRMED|INVOICED|PAID|CANCELLED
    free_cancellation_deadline: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    # Relationships
    customer = relationship("Customer", back_populates="requests", lazy="selectin")
    items = relationship(
        "Item", back_populates="request", lazy="selectin", order_by="Item.id"
    )
    quotation = relationship(
        "Quotation", back_populates="request", uselist=False, lazy="selectin"
    )
    payment = relationship(
        "Payment", back_populates="request", uselist=False, lazy="selectin"
    )

    @property
    def pickup_address(self) -> str:
        parts = [
            self.pickup_address_line1,
            self.pickup_address_line2,
            self.pickup_city,
            self.pickup_state,
            self.pickup_postal_code,
        ]
        return ", ".join(p for p in parts if p)

    @property
    def delivery_address(self) -> Optional[str]:
        if not self.delivery_required or not self.delivery_address_line1:
            return None
        parts = [
            self.delivery_address_line1,
            self.delivery_address_line2,
            self.delivery_city,
            self.delivery_state,
            self.delivery_postal_code,
        ]
        return ", ".join(p for p in parts if p)


class Item(Base, IntIdMixin):
    __tablename__ = "items"

    request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    size: Mapped[str] = mapped_column(String(20), default="medium")  # small|medium|large
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Relationships
    request = relationship("Request", back_populates="items")
