"""
Canonical value mapping for booking types and intro results.

Collapses free-text and legacy enum-like values into a fixed set of tags.

Key behaviors:
- Booking type defaults to STANDARD; VIP/COMP only from an explicit value
- Results are looked up in a fixed dictionary of known phrasings
- Unknown or empty results map to UNRESOLVED, never to a guess
- All functions are total: bad input degrades to a sentinel, never raises
"""

from __future__ import annotations

from enum import Enum

# --- Enums ---


class BookingType(str, Enum):
    """Canonical booking type."""

    STANDARD = "STANDARD"
    VIP = "VIP"
    COMP = "COMP"


class ResultCanon(str, Enum):
    """Canonical intro result."""

    PURCHASED = "PURCHASED"
    DIDNT_BUY = "DIDNT_BUY"
    NO_SHOW = "NO_SHOW"
    NOT_INTERESTED = "NOT_INTERESTED"
    FOLLOW_UP_NEEDED = "FOLLOW_UP_NEEDED"
    SECOND_INTRO_SCHEDULED = "SECOND_INTRO_SCHEDULED"
    UNRESOLVED = "UNRESOLVED"


# --- Lookup Tables ---

_EXPLICIT_BOOKING_TYPES: dict[str, BookingType] = {
    "vip": BookingType.VIP,
    "comp": BookingType.COMP,
}

RESULT_CANON_MAP: dict[str, ResultCanon] = {
    # Sale variants
    "premier + otbeat": ResultCanon.PURCHASED,
    "premier": ResultCanon.PURCHASED,
    "elite + otbeat": ResultCanon.PURCHASED,
    "elite": ResultCanon.PURCHASED,
    "basic + otbeat": ResultCanon.PURCHASED,
    "basic": ResultCanon.PURCHASED,
    "sold - unlimited": ResultCanon.PURCHASED,
    "sold - premier": ResultCanon.PURCHASED,
    "sold - basic": ResultCanon.PURCHASED,
    "sold - elite": ResultCanon.PURCHASED,
    "purchased": ResultCanon.PURCHASED,
    # Non-sale
    "didn't buy": ResultCanon.DIDNT_BUY,
    "didnt buy": ResultCanon.DIDNT_BUY,
    "no-show": ResultCanon.NO_SHOW,
    "no show": ResultCanon.NO_SHOW,
    "not interested": ResultCanon.NOT_INTERESTED,
    "follow-up needed": ResultCanon.FOLLOW_UP_NEEDED,
    "follow up needed": ResultCanon.FOLLOW_UP_NEEDED,
    "booked 2nd intro": ResultCanon.SECOND_INTRO_SCHEDULED,
    "second intro scheduled": ResultCanon.SECOND_INTRO_SCHEDULED,
}

_TERMINAL_RESULTS = frozenset({ResultCanon.PURCHASED, ResultCanon.NOT_INTERESTED})


# --- Canonicalization ---


def canonicalize_booking_type(raw: str | None) -> BookingType:
    """
    Map a raw booking-type value to its canonical tag.

    COMP and VIP are only produced by an explicit, exact (case-insensitive)
    value. Absence of data is always STANDARD.
    """
    if not raw:
        return BookingType.STANDARD
    return _EXPLICIT_BOOKING_TYPES.get(raw.strip().lower(), BookingType.STANDARD)


def canonicalize_result(raw: str | None) -> ResultCanon:
    """Map a raw result string to a canonical result, UNRESOLVED if unknown."""
    if not raw:
        return ResultCanon.UNRESOLVED
    return RESULT_CANON_MAP.get(raw.strip().lower(), ResultCanon.UNRESOLVED)


# --- Predicates ---


def is_sale(canon: ResultCanon) -> bool:
    """True only for a membership purchase."""
    return canon == ResultCanon.PURCHASED


def is_terminal(canon: ResultCanon) -> bool:
    """True when no further follow-up is expected."""
    return canon in _TERMINAL_RESULTS
