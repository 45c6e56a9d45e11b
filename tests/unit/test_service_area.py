"""Tests for postal code service-area checks."""

import pytest

from journey_forward.booking.service_area import (
    INVALID_FORMAT_MESSAGE,
    OUT_OF_AREA_MESSAGE,
    check_service_area,
    normalize_postal_code,
)


class TestNormalize:
    def test_strips_whitespace_and_uppercases(self):
        assert normalize_postal_code(" v6b 1a1 ") == "V6B1A1"

    def test_empty(self):
        assert normalize_postal_code("") == ""


class TestServiceArea:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("V6B 1A1", "V6B1A1"),  # Vancouver
            ("v6b1a1", "V6B1A1"),
            ("V6B-1A1", "V6B1A1"),
            ("V5H 2E8", "V5H2E8"),  # Burnaby
            ("V6X 1Z4", "V6X1Z4"),  # Richmond
            ("V3S 1A1", "V3S1A1"),  # Surrey
        ],
    )
    def test_accepted(self, raw, expected):
        result = check_service_area(raw)
        assert result.ok
        assert result.postal_code == expected
        assert result.reason is None

    def test_out_of_area(self):
        result = check_service_area("T2P 1J9")
        assert not result.ok
        assert result.reason == OUT_OF_AREA_MESSAGE

    @pytest.mark.parametrize("raw", ["", "12345", "V6B 1A", "VVV 111", "V6B  1A1X"])
    def test_malformed(self, raw):
        result = check_service_area(raw)
        assert not result.ok
        assert result.reason == INVALID_FORMAT_MESSAGE
