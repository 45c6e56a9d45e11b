"""Service-area eligibility by postal code prefix (forward sortation area)."""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

POSTAL_CODE_REGEX = re.compile(r"^[A-Za-z]\d[A-Za-z][ -]?\d[A-Za-z]\d$")

VANCOUVER_PREFIXES = (
    "V5K", "V5L", "V5M", "V5N", "V5P", "V5R", "V5S", "V5T", "V5V", "V5W", "V5X", "V5Y", "V5Z",
    "V6A", "V6B", "V6C", "V6E", "V6G", "V6H", "V6J", "V6K", "V6L", "V6M", "V6N", "V6P", "V6R",
    "V6S", "V6T", "V6Z", "V7X", "V7Y",
)
BURNABY_PREFIXES = ("V3J", "V3N", "V5A", "V5B", "V5C", "V5E", "V5G", "V5H", "V5J")
RICHMOND_PREFIXES = ("V6V", "V6W", "V6X", "V6Y", "V7A", "V7B", "V7C", "V7E")
SURREY_PREFIXES = (
    "V3R", "V3S", "V3T", "V3V", "V3W", "V3X", "V3Z", "V4A", "V4N", "V4P",
)

SUPPORTED_POSTAL_PREFIXES = frozenset(
    VANCOUVER_PREFIXES + BURNABY_PREFIXES + RICHMOND_PREFIXES + SURREY_PREFIXES
)

INVALID_FORMAT_MESSAGE = "Invalid postal code format (e.g. V6B 1A1)"
OUT_OF_AREA_MESSAGE = "We currently serve the Greater Vancouver area only."


class ServiceAreaResult(NamedTuple):
    ok: bool
    postal_code: str
    reason: Optional[str] = None


def normalize_postal_code(raw: str) -> str:
    """Strip all whitespace and upper-case: "v6b 1a1" -> "V6B1A1"."""
    return re.sub(r"\s+", "", raw or "").upper()


def check_service_area(raw: str) -> ServiceAreaResult:
    """Accept or reject a postal code with a human-readable reason."""
    code = normalize_postal_code(raw)
    if not POSTAL_CODE_REGEX.match((raw or "").strip()):
        return ServiceAreaResult(ok=False, postal_code=code, reason=INVALID_FORMAT_MESSAGE)

    code = code.replace("-", "")
    if code[:3] not in SUPPORTED_POSTAL_PREFIXES:
        return ServiceAreaResult(ok=False, postal_code=code, reason=OUT_OF_AREA_MESSAGE)

    return ServiceAreaResult(ok=True, postal_code=code)
