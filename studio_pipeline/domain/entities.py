"""
Domain entities for the studio pipeline.

Records are value-like snapshots handed to the decision functions:
- Booking: one scheduled intro
- Run: the realized outcome of an intro (may not exist yet)
- LedgerEntry: one append-only row of the AMC ledger (absolute value)
- ChurnEvent: members lost, effective from a civil date

Raw source fields (free-text results, legacy statuses, date strings) are kept
as they arrive; canonicalization happens in the decision modules next to this one.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
LifecycleBucket = Literal["today", "week", "past", "future", "unknown"]


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# --- Bookings & Runs ---


class Booking(_Record):
    id: str = Field(default_factory=_new_id)
    member_name: str = ""
    class_date: str | None = None  # YYYY-MM-DD, local civil date
    intro_time: str | None = None

    # Booking-type signals
    is_vip: bool | None = None
    booking_type_canon: str | None = None
    vip_session_id: str | None = None
    lead_source: str | None = None

    # Status signals (canon column + pre-canon free text)
    booking_status_canon: str | None = None
    booking_status: str | None = None

    deleted_at: datetime | None = None
    originating_booking_id: str | None = None
    phone: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class Run(_Record):
    id: str = Field(default_factory=_new_id)
    linked_intro_booked_id: str | None = None
    member_name: str = ""
    run_date: str | None = None

    result: str | None = None
    result_canon: str | None = None

    is_vip: bool | None = None
    vip_session_id: str | None = None
    lead_source: str | None = None

    buy_date: str | None = None
    commission_amount: float = 0.0
    amc_incremented_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)


# --- AMC Ledger ---


class LedgerEntry(_Record):
    id: str = Field(default_factory=_new_id)
    logged_date: date
    amc_value: int
    note: str | None = None
    created_by: str = "System"
    created_at: datetime = Field(default_factory=_utcnow)
    churn_event_id: str | None = None  # unique when set


class ChurnEvent(_Record):
    id: str = Field(default_factory=_new_id)
    churn_count: int = Field(gt=0)
    effective_date: date
    note: str | None = None
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
