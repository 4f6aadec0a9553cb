"""
Outcome resolution for intro bookings.

Combines a booking and its (possibly absent) run into a single decision:
is the intro's lifecycle complete, or does someone still need to log an
outcome for it?

Status fields exist in two generations: a canon column and the pre-canon
free-text column. Each is resolved "via canon field, else legacy field" until
legacy rows are fully migrated.

Key behaviors:
- Resolved if the booking status or the run result is in a terminal set
- A run whose result could not be mapped is NOT resolved
- Unresolved past intros exclude VIP/COMP and soft-deleted bookings
- Only strictly past bookings can ever need an outcome
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from studio_pipeline.domain.canonical import (
    BookingType,
    ResultCanon,
    canonicalize_booking_type,
    canonicalize_result,
)
from studio_pipeline.domain.entities import Booking, LifecycleBucket, Run
from studio_pipeline.domain.lifecycle import (
    DEFAULT_CONFIG,
    LifecycleConfig,
    bucket_for,
    parse_civil_date,
)
from studio_pipeline.domain.vip import is_vip_booking

# --- Terminal Sets ---

TERMINAL_BOOKING_STATUS_CANON = frozenset(
    {
        "CLOSED",
        "CLOSED_PURCHASED",
        "CANCELED",
        "CANCELLED",
        "DORMANT",
        "NOT_INTERESTED",
        "SECOND_INTRO_SCHEDULED",
    }
)
TERMINAL_BOOKING_STATUS_LEGACY = frozenset({"Closed", "Canceled", "Cancelled", "Dormant"})

TERMINAL_RUN_RESULT_CANON = frozenset({"SOLD", "NO_SALE", "NO_SHOW"})
TERMINAL_RUN_RESULT_LEGACY = frozenset({"Sold", "Didn't Buy", "No-show"})


def _resolved_via_canon_else_legacy(
    canon_value: str | None,
    canon_terminal: frozenset[str],
    legacy_value: str | None,
    legacy_terminal: frozenset[str],
) -> bool:
    if (canon_value or "").strip().upper() in canon_terminal:
        return True
    return (legacy_value or "").strip() in legacy_terminal


# --- Resolution ---


def is_resolved_outcome(booking: Booking, run: Run | None) -> bool:
    """True if the booking+run combination needs no further outcome action."""
    if _resolved_via_canon_else_legacy(
        booking.booking_status_canon,
        TERMINAL_BOOKING_STATUS_CANON,
        booking.booking_status,
        TERMINAL_BOOKING_STATUS_LEGACY,
    ):
        return True

    if run is None:
        return False

    return _resolved_via_canon_else_legacy(
        run.result_canon,
        TERMINAL_RUN_RESULT_CANON,
        run.result,
        TERMINAL_RUN_RESULT_LEGACY,
    )


def is_unresolved_past_intro(
    booking: Booking,
    run: Run | None,
    today: date,
    config: LifecycleConfig = DEFAULT_CONFIG,
) -> bool:
    """
    True if the booking is a past intro still waiting for an outcome.

    Never true for today/future dates, VIP/COMP bookings or soft-deleted rows.
    """
    if is_vip_booking(booking):
        return False
    if booking.deleted_at is not None:
        return False
    if bucket_for(booking.class_date, today, config) != "past":
        return False
    return not is_resolved_outcome(booking, run)


# --- Combined Classification ---


@dataclass(frozen=True)
class BookingClassification:
    """Everything downstream views need to know about one booking."""

    booking_id: str
    booking_type: BookingType
    is_vip: bool
    bucket: LifecycleBucket
    result: ResultCanon
    resolved: bool
    needs_outcome: bool


def classify_booking(
    booking: Booking,
    run: Run | None,
    today: date,
    config: LifecycleConfig = DEFAULT_CONFIG,
) -> BookingClassification:
    """Resolve a booking and its run into one consistent classification."""
    return BookingClassification(
        booking_id=booking.id,
        booking_type=canonicalize_booking_type(booking.booking_type_canon),
        is_vip=is_vip_booking(booking),
        bucket=bucket_for(booking.class_date, today, config),
        result=canonicalize_result(run.result if run else None),
        resolved=is_resolved_outcome(booking, run),
        needs_outcome=is_unresolved_past_intro(booking, run, today, config),
    )


def latest_runs_by_booking(runs: Iterable[Run]) -> dict[str, Run]:
    """Index runs by linked booking id, keeping the most recently created."""
    latest: dict[str, Run] = {}
    for run in runs:
        if not run.linked_intro_booked_id:
            continue
        current = latest.get(run.linked_intro_booked_id)
        if current is None or run.created_at >= current.created_at:
            latest[run.linked_intro_booked_id] = run
    return latest


def needs_outcome_worklist(
    bookings: Sequence[Booking],
    runs: Iterable[Run],
    today: date,
    config: LifecycleConfig = DEFAULT_CONFIG,
) -> list[Booking]:
    """Bookings that need an outcome logged, oldest class date first."""
    by_booking = latest_runs_by_booking(runs)
    pending = [
        b
        for b in bookings
        if is_unresolved_past_intro(b, by_booking.get(b.id), today, config)
    ]
    # Unresolved past intros always have a parseable date
    return sorted(pending, key=lambda b: (parse_civil_date(b.class_date), b.created_at))
