"""
Booking status and intro result normalization.

Outcome changes write the legacy free-text columns that older views still
read, so this module maps in both directions:
- raw text -> BookingStatus / IntroResult
- IntroResult -> the BookingStatus it implies
- BookingStatus / IntroResult -> the string stored in the database
"""

from __future__ import annotations

from enum import Enum

# --- Enums ---


class BookingStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SECOND_INTRO_SCHEDULED = "SECOND_INTRO_SCHEDULED"
    NO_SHOW = "NO_SHOW"
    NOT_INTERESTED = "NOT_INTERESTED"
    CLOSED_PURCHASED = "CLOSED_PURCHASED"
    CLOSED_DIDNT_BUY = "CLOSED_DIDNT_BUY"
    CANCELLED = "CANCELLED"
    DELETED_SOFT = "DELETED_SOFT"


class IntroResult(str, Enum):
    PREMIER = "PREMIER"
    ELITE = "ELITE"
    BASIC = "BASIC"
    NO_SHOW = "NO_SHOW"
    DIDNT_BUY = "DIDNT_BUY"
    NOT_INTERESTED = "NOT_INTERESTED"
    FOLLOW_UP_NEEDED = "FOLLOW_UP_NEEDED"
    SECOND_INTRO_SCHEDULED = "SECOND_INTRO_SCHEDULED"
    UNRESOLVED = "UNRESOLVED"


_MEMBERSHIP_RESULTS = frozenset({IntroResult.PREMIER, IntroResult.ELITE, IntroResult.BASIC})

# --- Normalizers ---

STATUS_MAP: dict[str, BookingStatus] = {
    "active": BookingStatus.ACTIVE,
    "closed – bought": BookingStatus.CLOSED_PURCHASED,
    "closed - bought": BookingStatus.CLOSED_PURCHASED,
    "closed bought": BookingStatus.CLOSED_PURCHASED,
    "closed_purchased": BookingStatus.CLOSED_PURCHASED,
    "not interested": BookingStatus.NOT_INTERESTED,
    "not_interested": BookingStatus.NOT_INTERESTED,
    "2nd intro scheduled": BookingStatus.SECOND_INTRO_SCHEDULED,
    "second_intro_scheduled": BookingStatus.SECOND_INTRO_SCHEDULED,
    "no show": BookingStatus.NO_SHOW,
    "no-show": BookingStatus.NO_SHOW,
    "no_show": BookingStatus.NO_SHOW,
    "cancelled": BookingStatus.CANCELLED,
    "canceled": BookingStatus.CANCELLED,
    "deleted (soft)": BookingStatus.DELETED_SOFT,
    "deleted_soft": BookingStatus.DELETED_SOFT,
    "closed – didnt buy": BookingStatus.CLOSED_DIDNT_BUY,
    "closed_didnt_buy": BookingStatus.CLOSED_DIDNT_BUY,
    "unscheduled": BookingStatus.ACTIVE,
}

RESULT_MAP: dict[str, IntroResult] = {
    "no-show": IntroResult.NO_SHOW,
    "no show": IntroResult.NO_SHOW,
    "no_show": IntroResult.NO_SHOW,
    "didn't buy": IntroResult.DIDNT_BUY,
    "didnt_buy": IntroResult.DIDNT_BUY,
    "didnt buy": IntroResult.DIDNT_BUY,
    "not interested": IntroResult.NOT_INTERESTED,
    "not_interested": IntroResult.NOT_INTERESTED,
    "follow-up needed": IntroResult.FOLLOW_UP_NEEDED,
    "follow_up_needed": IntroResult.FOLLOW_UP_NEEDED,
    "booked 2nd intro": IntroResult.SECOND_INTRO_SCHEDULED,
    "second_intro_scheduled": IntroResult.SECOND_INTRO_SCHEDULED,
    "unresolved": IntroResult.UNRESOLVED,
}

# Checked in order
_TIER_KEYWORDS: tuple[tuple[str, IntroResult], ...] = (
    ("premier", IntroResult.PREMIER),
    ("elite", IntroResult.ELITE),
    ("basic", IntroResult.BASIC),
)


def normalize_booking_status(raw: str | None) -> BookingStatus:
    """Map a raw booking status to its canonical value, ACTIVE if unknown."""
    if not raw:
        return BookingStatus.ACTIVE
    return STATUS_MAP.get(raw.strip().lower(), BookingStatus.ACTIVE)


def normalize_intro_result(raw: str | None) -> IntroResult:
    """Map a raw result to an IntroResult; membership tiers match by keyword."""
    if not raw:
        return IntroResult.UNRESOLVED
    key = raw.strip().lower()
    if key in RESULT_MAP:
        return RESULT_MAP[key]
    for keyword, tier in _TIER_KEYWORDS:
        if keyword in key:
            return tier
    return IntroResult.UNRESOLVED


def is_membership_sale_result(result: IntroResult) -> bool:
    return result in _MEMBERSHIP_RESULTS


# --- Mappers ---

_RESULT_TO_STATUS: dict[IntroResult, BookingStatus] = {
    IntroResult.PREMIER: BookingStatus.CLOSED_PURCHASED,
    IntroResult.ELITE: BookingStatus.CLOSED_PURCHASED,
    IntroResult.BASIC: BookingStatus.CLOSED_PURCHASED,
    IntroResult.NOT_INTERESTED: BookingStatus.NOT_INTERESTED,
    IntroResult.SECOND_INTRO_SCHEDULED: BookingStatus.SECOND_INTRO_SCHEDULED,
}


def map_result_to_booking_status(result: IntroResult) -> BookingStatus:
    """
    Booking status implied by an intro result.

    No-shows, non-buyers and follow-ups stay ACTIVE so they can be rebooked.
    """
    return _RESULT_TO_STATUS.get(result, BookingStatus.ACTIVE)


# --- Database Formatters ---

BOOKING_STATUS_DISPLAY: dict[BookingStatus, str] = {
    BookingStatus.ACTIVE: "Active",
    BookingStatus.SECOND_INTRO_SCHEDULED: "2nd Intro Scheduled",
    BookingStatus.NO_SHOW: "Active",
    BookingStatus.NOT_INTERESTED: "Not Interested",
    BookingStatus.CLOSED_PURCHASED: "Closed – Bought",
    BookingStatus.CLOSED_DIDNT_BUY: "Active",
    BookingStatus.CANCELLED: "Cancelled",
    BookingStatus.DELETED_SOFT: "Deleted (soft)",
}

INTRO_RESULT_DISPLAY: dict[IntroResult, str] = {
    IntroResult.NO_SHOW: "No-show",
    IntroResult.DIDNT_BUY: "Didn't Buy",
    IntroResult.NOT_INTERESTED: "Not interested",
    IntroResult.FOLLOW_UP_NEEDED: "Follow-up needed",
    IntroResult.SECOND_INTRO_SCHEDULED: "Booked 2nd intro",
    IntroResult.UNRESOLVED: "Unresolved",
}


def format_booking_status_for_db(status: BookingStatus) -> str:
    return BOOKING_STATUS_DISPLAY.get(status, "Active")


def format_intro_result_for_db(result: IntroResult, membership_type: str | None = None) -> str:
    """Stored result string; sales store the membership type when known."""
    if is_membership_sale_result(result):
        return membership_type or result.value
    return INTRO_RESULT_DISPLAY.get(result, "Unresolved")
