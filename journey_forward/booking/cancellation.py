"""Cancellation window and booking lead-time rules.

All functions are pure: callers pass ``now`` explicitly. Naive datetimes
(e.g. read back from SQLite) are treated as UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

DEFAULT_CANCELLATION_HOURS = 24


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def cancellation_deadline(
    scheduled: datetime, hours: int = DEFAULT_CANCELLATION_HOURS
) -> datetime:
    """Cutoff before which a booking may be cancelled without a fee."""
    return ensure_utc(scheduled) - timedelta(hours=hours)


def can_cancel_free(
    scheduled: datetime,
    now: datetime,
    hours: int = DEFAULT_CANCELLATION_HOURS,
) -> bool:
    """True iff ``now`` is strictly before ``scheduled - hours``."""
    return ensure_utc(now) < cancellation_deadline(scheduled, hours)


def calculate_fee(
    scheduled: datetime,
    now: datetime,
    fee_amount: Decimal,
    hours: int = DEFAULT_CANCELLATION_HOURS,
) -> Decimal:
    """Fee owed for cancelling at ``now``: zero inside the free window."""
    if can_cancel_free(scheduled, now, hours):
        return Decimal("0")
    return Decimal(fee_amount)


def pickup_has_passed(scheduled: datetime, now: datetime) -> bool:
    return ensure_utc(now) >= ensure_utc(scheduled)


def is_valid_booking_date(
    when: datetime,
    now: datetime,
    minimum_hours: int = DEFAULT_CANCELLATION_HOURS,
) -> bool:
    """Pickup must be at least ``minimum_hours`` from now."""
    return ensure_utc(when) >= ensure_utc(now) + timedelta(hours=minimum_hours)
