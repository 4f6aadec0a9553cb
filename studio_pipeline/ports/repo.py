"""
Storage interfaces.

Protocol-based interfaces for the records the pipeline reads and writes.
Implementations: SQLite (adapters.sqlite_db), in-memory mocks in tests.

Invariants:
- I1: Ledger entries are append-only; no port exposes update or delete
- I2: Ledger order is creation order, never logged_date
- I3: At most one ledger entry per churn_event_id
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from studio_pipeline.domain.entities import Booking, ChurnEvent, LedgerEntry, Run


class DuplicateLedgerEntryError(Exception):
    """Raised when a ledger entry for the same churn event already exists."""

    def __init__(self, churn_event_id: str) -> None:
        super().__init__(f"Ledger entry already exists for churn event {churn_event_id}")
        self.churn_event_id = churn_event_id


# -----------------------------------------------------------------------------
# Bookings & Runs
# -----------------------------------------------------------------------------


class BookingRepoPort(Protocol):
    """Repository for intro bookings."""

    def get_by_id(self, booking_id: str) -> Booking | None:
        """Get booking by ID."""
        ...

    def list_by_date_range(self, start: date | None, end: date | None) -> list[Booking]:
        """List bookings with class_date within [start, end] (open bounds allowed)."""
        ...

    def save(self, booking: Booking) -> Booking:
        """Save or update booking (upsert)."""
        ...


class RunRepoPort(Protocol):
    """Repository for intro runs."""

    def get_by_id(self, run_id: str) -> Run | None:
        """Get run by ID."""
        ...

    def get_latest_for_booking(self, booking_id: str) -> Run | None:
        """Get the most recently created run linked to a booking."""
        ...

    def list_all(self) -> list[Run]:
        """List all runs."""
        ...

    def save(self, run: Run) -> Run:
        """Save or update run (upsert)."""
        ...


# -----------------------------------------------------------------------------
# AMC Ledger
# -----------------------------------------------------------------------------


class LedgerRepoPort(Protocol):
    """
    Append-only AMC ledger.

    The current value is the amc_value of the most recently created entry.
    """

    def latest(self) -> LedgerEntry | None:
        """Get the most recently created entry, or None if the ledger is empty."""
        ...

    def append(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Append an entry.

        Raises:
            DuplicateLedgerEntryError: entry.churn_event_id is already linked
        """
        ...

    def list_notes(self, prefix: str) -> list[str]:
        """List notes of entries whose note starts with prefix."""
        ...

    def get_by_churn_event(self, churn_event_id: str) -> LedgerEntry | None:
        """Get the entry linked to a churn event."""
        ...

    def list_all(self) -> list[LedgerEntry]:
        """List all entries, newest first."""
        ...


class ChurnRepoPort(Protocol):
    """Repository for churn events."""

    def list_effective(self, as_of: date) -> list[ChurnEvent]:
        """List events with effective_date <= as_of, oldest effective first."""
        ...

    def save(self, event: ChurnEvent) -> ChurnEvent:
        """Save a churn event."""
        ...
