"""Booking status lifecycle.

Order: received, quoted, confirmed, invoiced, paid.
A request may be cancelled until it is invoiced; paid and cancelled are
terminal. The allowed edges live in ``STATUS_FLOW`` so the guard is a
single lookup.
"""

from enum import Enum

from journey_forward.errors import InvalidTransitionError


class RequestStatus(str, Enum):
    RECEIVED = "RECEIVED"
    QUOTED = "QUOTED"
    CONFIRMED = "CONFIRMED"
    INVOICED = "INVOICED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


STATUS_FLOW: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.RECEIVED: frozenset({RequestStatus.QUOTED, RequestStatus.CANCELLED}),
    RequestStatus.QUOTED: frozenset({RequestStatus.CONFIRMED, RequestStatus.CANCELLED}),
    RequestStatus.CONFIRMED: frozenset({RequestStatus.INVOICED, RequestStatus.CANCELLED}),
    RequestStatus.INVOICED: frozenset({RequestStatus.PAID}),
    RequestStatus.PAID: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}

STATUS_LABELS = {
    RequestStatus.RECEIVED: "Received",
    RequestStatus.QUOTED: "Quoted",
    RequestStatus.CONFIRMED: "Confirmed",
    RequestStatus.INVOICED: "Invoiced",
    RequestStatus.PAID: "Paid",
    RequestStatus.CANCELLED: "Cancelled",
}

INITIAL_STATUS = RequestStatus.RECEIVED


def can_transition(current: RequestStatus | str, target: RequestStatus | str) -> bool:
    """Return True if ``target`` is a permitted successor of ``current``."""
    return RequestStatus(target) in STATUS_FLOW[RequestStatus(current)]


def ensure_transition(current: RequestStatus | str, target: RequestStatus | str) -> RequestStatus:
    """Validate a status change and return the target status.

    Raises:
        InvalidTransitionError: if the edge is not in ``STATUS_FLOW``.
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(RequestStatus(current).value, RequestStatus(target).value)
    return RequestStatus(target)


def is_terminal(status: RequestStatus | str) -> bool:
    return not STATUS_FLOW[RequestStatus(status)]
