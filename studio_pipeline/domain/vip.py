"""
VIP/COMP classification for bookings and runs.

VIP events and complimentary bookings sit outside the sales funnel and are
excluded from dashboards, questionnaires, follow-up queues and scoreboards.

Key behaviors:
- Signals are OR'd; the first one that fires is reported
- Signal order: explicit flag, canonical type, VIP session link, lead source
- Never inferred from missing data
- Conversion of a VIP booking into a real intro is the caller's concern
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from enum import Enum

from studio_pipeline.domain.canonical import BookingType, canonicalize_booking_type
from studio_pipeline.domain.entities import Booking, Run

# --- Enums ---


class VipSignal(str, Enum):
    """Which field marked a record as VIP/COMP."""

    FLAG = "flag"
    BOOKING_TYPE = "booking_type"
    SESSION = "session"
    LEAD_SOURCE = "lead_source"


_OUT_OF_FUNNEL_TYPES = frozenset({BookingType.VIP, BookingType.COMP})

# Shorter phone strings are too ambiguous to group people by
MIN_PHONE_DIGITS = 7


# --- Signal Helpers ---


def _has_session(vip_session_id: str | None) -> bool:
    return bool(vip_session_id and vip_session_id.strip())


def _lead_source_is_vip(lead_source: str | None) -> bool:
    if not lead_source:
        return False
    return "vip" in lead_source.lower()


# --- Classification ---


def vip_signal(booking: Booking) -> VipSignal | None:
    """Return the first VIP/COMP signal present on a booking, or None."""
    if booking.is_vip is True:
        return VipSignal.FLAG
    if canonicalize_booking_type(booking.booking_type_canon) in _OUT_OF_FUNNEL_TYPES:
        return VipSignal.BOOKING_TYPE
    if _has_session(booking.vip_session_id):
        return VipSignal.SESSION
    if _lead_source_is_vip(booking.lead_source):
        return VipSignal.LEAD_SOURCE
    return None


def is_vip_booking(booking: Booking) -> bool:
    """True if the booking is a VIP event or COMP booking."""
    return vip_signal(booking) is not None


def is_vip_run(run: Run) -> bool:
    """True if the run is linked to a VIP event."""
    if run.is_vip is True:
        return True
    if _has_session(run.vip_session_id):
        return True
    return _lead_source_is_vip(run.lead_source)


def should_exclude_from_funnel(booking: Booking) -> bool:
    """True if the booking must be hidden from the standard sales funnel."""
    return is_vip_booking(booking)


# --- 2nd Intro Detection ---


def _name_key(name: str) -> str:
    return re.sub(r"\s+", "", name.lower())


def _phone_digits(phone: str | None) -> str:
    return re.sub(r"\D", "", phone or "")


def is_second_intro(booking_id: str, bookings: Sequence[Booking]) -> bool:
    """
    True if the booking is a person's 2nd (or later) intro visit.

    An originating_booking_id link is definitive. Otherwise the booking is
    grouped with other non-VIP bookings by name and by phone digits; anything
    but the earliest one in the group (class date, then creation time) is a
    repeat visit.
    """
    booking = next((b for b in bookings if b.id == booking_id), None)
    if booking is None or is_vip_booking(booking):
        return False
    if booking.originating_booking_id:
        return True

    non_vip = [b for b in bookings if not is_vip_booking(b)]

    name_key = _name_key(booking.member_name)
    group = {b.id: b for b in non_vip if _name_key(b.member_name) == name_key}

    phone = _phone_digits(booking.phone)
    if len(phone) >= MIN_PHONE_DIGITS:
        for b in non_vip:
            if _phone_digits(b.phone) == phone:
                group.setdefault(b.id, b)

    if len(group) <= 1:
        return False

    first = min(group.values(), key=lambda b: (b.class_date or "", b.created_at))
    return first.id != booking_id
