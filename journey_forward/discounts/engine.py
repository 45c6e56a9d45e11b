"""Discount Engine: validates discount codes and applies them to an invoice."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

import structlog

from journey_forward.booking.cancellation import ensure_utc
from journey_forward.errors import ValidationError
from journey_forward.models.discount import DiscountCode, DiscountType
from journey_forward.schemas.discount import DiscountPreview

logger = structlog.get_logger()

CENTS = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("0.12")

INVALID_CODE_MESSAGE = "Invalid discount code."
INACTIVE_MESSAGE = "This code is no longer active."
NOT_YET_VALID_MESSAGE = "This code is not yet valid."
EXPIRED_MESSAGE = "This code has expired."


def quantize(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


class DiscountEngine:
    """Checks a code's validity window and computes discounted amounts."""

    def __init__(
        self,
        business_timezone: str = "America/Vancouver",
        default_tax_rate: Decimal = DEFAULT_TAX_RATE,
    ):
        self.tz = ZoneInfo(business_timezone)
        self.default_tax_rate = Decimal(default_tax_rate)

    def _local_date(self, value: datetime):
        return ensure_utc(value).astimezone(self.tz).date()

    def check_validity(self, discount: DiscountCode | None, now: datetime) -> DiscountCode:
        """Reject missing, inactive, not-yet-started or expired codes.

        Validity is judged by calendar day in the business timezone: a
        code is usable from the start of its ``starts_at`` day through the
        end of its ``expires_at`` day.

        Raises:
            ValidationError: with a customer-facing message.
        """
        if discount is None:
            raise ValidationError(INVALID_CODE_MESSAGE)
        if not discount.is_active:
            raise ValidationError(INACTIVE_MESSAGE)

        today = self._local_date(now)
        if discount.starts_at and today < self._local_date(discount.starts_at):
            raise ValidationError(NOT_YET_VALID_MESSAGE)
        if discount.expires_at and today > self._local_date(discount.expires_at):
            raise ValidationError(EXPIRED_MESSAGE)

        return discount

    def discount_amount(self, discount: DiscountCode, subtotal: Decimal) -> Decimal:
        """Amount taken off the subtotal, never more than the subtotal."""
        subtotal = Decimal(subtotal)
        if discount.type == DiscountType.PERCENTAGE.value:
            amount = subtotal * Decimal(discount.value) / Decimal("100")
        else:
            amount = Decimal(discount.value)
        return quantize(min(amount, subtotal))

    def apply(self, discount: DiscountCode, subtotal: Decimal, tax: Decimal) -> DiscountPreview:
        """Apply ``discount`` and recompute tax at the quotation's effective rate.

        Args:
            discount: A code already accepted by ``check_validity``
            subtotal: Pre-discount subtotal
            tax: Pre-discount tax (used to derive the effective rate)

        Returns:
            DiscountPreview with the discounted subtotal, tax and total
        """
        subtotal = Decimal(subtotal)
        tax = Decimal(tax)
        rate = tax / subtotal if subtotal > 0 else self.default_tax_rate

        amount = self.discount_amount(discount, subtotal)
        new_subtotal = quantize(subtotal - amount)
        new_tax = quantize(new_subtotal * rate)
        total = new_subtotal + new_tax

        logger.info(
            "discount_applied",
            code=discount.code,
            type=discount.type,
            discount_amount=str(amount),
            total=str(total),
        )

        return DiscountPreview(
            code=discount.code,
            type=discount.type,
            value=Decimal(discount.value),
            original_subtotal=quantize(subtotal),
            discount_amount=amount,
            subtotal=new_subtotal,
            tax=new_tax,
            total=total,
        )
