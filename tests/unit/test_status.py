"""Tests for the booking status lifecycle."""

import itertools

import pytest

from journey_forward.booking.status import (
    INITIAL_STATUS,
    RequestStatus,
    can_transition,
    ensure_transition,
    is_terminal,
)
from journey_forward.errors import InvalidTransitionError

S = RequestStatus

ALLOWED = {
    (S.RECEIVED, S.QUOTED),
    (S.RECEIVED, S.CANCELLED),
    (S.QUOTED, S.CONFIRMED),
    (S.QUOTED, S.CANCELLED),
    (S.CONFIRMED, S.INVOICED),
    (S.CONFIRMED, S.CANCELLED),
    (S.INVOICED, S.PAID),
}


class TestTransitions:
    """Every (current, target) pair against the permitted edges."""

    @pytest.mark.parametrize("current,target", list(itertools.product(S, S)))
    def test_every_pair(self, current, target):
        assert can_transition(current, target) == ((current, target) in ALLOWED)

    def test_accepts_plain_strings(self):
        assert can_transition("RECEIVED", "QUOTED")
        assert not can_transition("PAID", "CANCELLED")

    def test_ensure_returns_target(self):
        assert ensure_transition(S.QUOTED, S.CONFIRMED) == S.CONFIRMED

    def test_ensure_rejects_with_message(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            ensure_transition(S.INVOICED, S.CANCELLED)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Cannot change status from INVOICED to CANCELLED."

    def test_no_self_transitions(self):
        for status in S:
            assert not can_transition(status, status)


class TestStates:
    def test_initial_status(self):
        assert INITIAL_STATUS == S.RECEIVED

    def test_terminal_states(self):
        assert is_terminal(S.PAID)
        assert is_terminal(S.CANCELLED)
        assert not is_terminal(S.RECEIVED)
        assert not is_terminal("INVOICED")
