"""Payment model: local mirror of the processor's intent state."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from journey_forward.models.base import Base, IntIdMixin, TimestampMixin

# Local statuses; everything else is the processor's intent status upper-cased.
PAYMENT_PENDING = "PENDING"
PAYMENT_AUTHORIZED = "AUTHORIZED"
PAYMENT_READY = "READY_FOR_PAYMENT"
PAYMENT_REQUIRES_CONFIRMATION = "REQUIRES_CONFIRMATION"
PAYMENT_SUCCEEDED = "SUCCEEDED"
PAYMENT_CANCELLATION_FEE_CHARGED = "CANCELLATION_FEE_CHARGED"


class Payment(Base, IntIdMixin, TimestampMixin):
    __tablename__ = "payments"

    request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("requests.id"), unique=True, nullable=False
    )

    # Amounts (set when the final invoice is sent)
    subtotal: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    tax: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    total: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    discount_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    discount_code_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("discount_codes.id", ondelete="SET NULL"), nullable=True
    )
    currency: Mapped[str] = mapped_column(String(3), default="CAD")

    # Stripe
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    stripe_payment_intent_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[str] = mapped_column(String(40), default=PAYMENT_PENDING)

    # Relationships
    request = relationship("Request", back_populates="payment")
