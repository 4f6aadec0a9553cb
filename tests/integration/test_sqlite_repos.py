"""
Repository contract tests against a real SQLite schema.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from studio_pipeline.adapters.sqlite_db import (
    SQLiteBookingRepo,
    SQLiteChurnRepo,
    SQLiteLedgerRepo,
    SQLiteRunRepo,
)
from studio_pipeline.domain.entities import Booking, ChurnEvent, LedgerEntry, Run
from studio_pipeline.ports.repo import DuplicateLedgerEntryError


class TestBookingRepo:
    def test_round_trip(self, db_path: str) -> None:
        repo = SQLiteBookingRepo(db_path)
        booking = Booking(
            member_name="Ana Lopez",
            class_date="2026-03-10",
            is_vip=None,
            booking_type_canon="COMP",
            phone="555-123-4567",
        )
        repo.save(booking)
        assert repo.get_by_id(booking.id) == booking

    def test_upsert(self, db_path: str) -> None:
        repo = SQLiteBookingRepo(db_path)
        booking = repo.save(Booking(member_name="Ana", booking_status="Active"))
        repo.save(booking.model_copy(update={"booking_status": "Closed", "is_vip": False}))

        loaded = repo.get_by_id(booking.id)
        assert loaded.booking_status == "Closed"
        assert loaded.is_vip is False

    def test_date_range(self, db_path: str) -> None:
        repo = SQLiteBookingRepo(db_path)
        for day in ("2026-03-01", "2026-03-05", "2026-03-09"):
            repo.save(Booking(member_name=day, class_date=day))
        repo.save(Booking(member_name="undated"))

        in_range = repo.list_by_date_range(date(2026, 3, 2), date(2026, 3, 9))
        assert [b.member_name for b in in_range] == ["2026-03-05", "2026-03-09"]
        assert len(repo.list_by_date_range(None, None)) == 4

    def test_missing(self, db_path: str) -> None:
        assert SQLiteBookingRepo(db_path).get_by_id("nope") is None


class TestRunRepo:
    def test_latest_for_booking(self, db_path: str) -> None:
        bookings = SQLiteBookingRepo(db_path)
        runs = SQLiteRunRepo(db_path)
        booking = bookings.save(Booking(member_name="Ana"))
        base = datetime(2026, 3, 1, tzinfo=UTC)
        runs.save(Run(linked_intro_booked_id=booking.id, result="No-show", created_at=base))
        newer = runs.save(
            Run(
                linked_intro_booked_id=booking.id,
                result="Elite",
                created_at=base + timedelta(days=1),
                amc_incremented_at=base + timedelta(days=1),
            )
        )

        assert runs.get_latest_for_booking(booking.id) == newer
        assert len(runs.list_all()) == 2
        assert runs.get_latest_for_booking("other") is None


class TestLedgerRepo:
    def test_empty(self, db_path: str) -> None:
        repo = SQLiteLedgerRepo(db_path)
        assert repo.latest() is None
        assert repo.list_all() == []

    def test_latest_is_creation_order(self, db_path: str) -> None:
        repo = SQLiteLedgerRepo(db_path)
        repo.append(LedgerEntry(logged_date=date(2026, 3, 10), amc_value=40))
        second = repo.append(LedgerEntry(logged_date=date(2026, 1, 1), amc_value=38))

        assert repo.latest() == second
        assert [e.amc_value for e in repo.list_all()] == [38, 40]

    def test_duplicate_churn_event_rejected(self, db_path: str) -> None:
        repo = SQLiteLedgerRepo(db_path)
        repo.append(LedgerEntry(logged_date=date(2026, 3, 1), amc_value=10, churn_event_id="e1"))

        with pytest.raises(DuplicateLedgerEntryError) as exc:
            repo.append(
                LedgerEntry(logged_date=date(2026, 3, 1), amc_value=9, churn_event_id="e1")
            )
        assert exc.value.churn_event_id == "e1"
        assert len(repo.list_all()) == 1

    def test_unlinked_entries_allowed(self, db_path: str) -> None:
        repo = SQLiteLedgerRepo(db_path)
        repo.append(LedgerEntry(logged_date=date(2026, 3, 1), amc_value=10))
        repo.append(LedgerEntry(logged_date=date(2026, 3, 1), amc_value=11))
        assert len(repo.list_all()) == 2

    def test_list_notes_prefix(self, db_path: str) -> None:
        repo = SQLiteLedgerRepo(db_path)
        repo.append(LedgerEntry(logged_date=date(2026, 3, 1), amc_value=1, note="Auto: Churn x"))
        repo.append(LedgerEntry(logged_date=date(2026, 3, 1), amc_value=2, note="Auto: Ana"))
        repo.append(LedgerEntry(logged_date=date(2026, 3, 1), amc_value=3, note="AutoX Churn"))
        repo.append(LedgerEntry(logged_date=date(2026, 3, 1), amc_value=4))

        assert repo.list_notes("Auto: Churn") == ["Auto: Churn x"]

    def test_get_by_churn_event(self, db_path: str) -> None:
        repo = SQLiteLedgerRepo(db_path)
        entry = repo.append(
            LedgerEntry(logged_date=date(2026, 3, 1), amc_value=5, churn_event_id="e9")
        )
        assert repo.get_by_churn_event("e9") == entry
        assert repo.get_by_churn_event("e0") is None


class TestChurnRepo:
    def test_list_effective(self, db_path: str) -> None:
        repo = SQLiteChurnRepo(db_path)
        later = repo.save(ChurnEvent(churn_count=2, effective_date=date(2026, 3, 5)))
        earlier = repo.save(ChurnEvent(churn_count=1, effective_date=date(2026, 3, 1)))
        repo.save(ChurnEvent(churn_count=4, effective_date=date(2026, 3, 20)))

        assert repo.list_effective(date(2026, 3, 5)) == [earlier, later]
        assert repo.list_effective(date(2026, 2, 1)) == []
