from datetime import date
from pathlib import Path

import pytest

from studio_pipeline.adapters.clock import FixedClock
from studio_pipeline.adapters.migrator import SQLiteMigrator
from studio_pipeline.domain.entities import Booking, ChurnEvent, LedgerEntry, Run
from studio_pipeline.ports.repo import DuplicateLedgerEntryError

PROJECT_ROOT = Path(__file__).parent.parent
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

TODAY = date(2026, 3, 11)


# --- Mock Repositories ---


class MockBookingRepo:
    """In-memory booking repository for testing."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}

    def get_by_id(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def list_by_date_range(self, start: date | None, end: date | None) -> list[Booking]:
        result = []
        for b in self._bookings.values():
            if start is not None and (b.class_date is None or b.class_date < start.isoformat()):
                continue
            if end is not None and (b.class_date is None or b.class_date > end.isoformat()):
                continue
            result.append(b)
        return result

    def save(self, booking: Booking) -> Booking:
        self._bookings[booking.id] = booking
        return booking


class MockRunRepo:
    """In-memory run repository for testing."""

    def __init__(self) -> None:
        self._runs: dict[str, Run] = {}

    def get_by_id(self, run_id: str) -> Run | None:
        return self._runs.get(run_id)

    def get_latest_for_booking(self, booking_id: str) -> Run | None:
        linked = [r for r in self._runs.values() if r.linked_intro_booked_id == booking_id]
        return max(linked, key=lambda r: r.created_at) if linked else None

    def list_all(self) -> list[Run]:
        return list(self._runs.values())

    def save(self, run: Run) -> Run:
        self._runs[run.id] = run
        return run


class MockLedgerRepo:
    """In-memory append-only ledger; enforces one entry per churn event."""

    def __init__(self) -> None:
        self.entries: list[LedgerEntry] = []
        self.fail_on_append = False

    def latest(self) -> LedgerEntry | None:
        return self.entries[-1] if self.entries else None

    def append(self, entry: LedgerEntry) -> LedgerEntry:
        if self.fail_on_append:
            raise RuntimeError("ledger unavailable")
        if entry.churn_event_id and any(
            e.churn_event_id == entry.churn_event_id for e in self.entries
        ):
            raise DuplicateLedgerEntryError(entry.churn_event_id)
        self.entries.append(entry)
        return entry

    def list_notes(self, prefix: str) -> list[str]:
        return [e.note for e in self.entries if e.note and e.note.startswith(prefix)]

    def get_by_churn_event(self, churn_event_id: str) -> LedgerEntry | None:
        return next((e for e in self.entries if e.churn_event_id == churn_event_id), None)

    def list_all(self) -> list[LedgerEntry]:
        return list(reversed(self.entries))


class MockChurnRepo:
    """In-memory churn event repository for testing."""

    def __init__(self) -> None:
        self.events: list[ChurnEvent] = []

    def list_effective(self, as_of: date) -> list[ChurnEvent]:
        effective = [e for e in self.events if e.effective_date <= as_of]
        return sorted(effective, key=lambda e: (e.effective_date, e.created_at))

    def save(self, event: ChurnEvent) -> ChurnEvent:
        self.events.append(event)
        return event


class MockRules:
    """Rules port with the default studio settings."""

    def __init__(self, amc_target: int | None = 400) -> None:
        self._amc_target = amc_target

    def get_auto_churn_prefix(self) -> str:
        return "Auto: Churn"

    def get_churn_id_prefix_length(self) -> int:
        return 8

    def get_default_author(self) -> str:
        return "System"

    def get_amc_target(self) -> int | None:
        return self._amc_target


# --- Fixtures ---


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def booking_repo() -> MockBookingRepo:
    return MockBookingRepo()


@pytest.fixture
def run_repo() -> MockRunRepo:
    return MockRunRepo()


@pytest.fixture
def ledger_repo() -> MockLedgerRepo:
    return MockLedgerRepo()


@pytest.fixture
def churn_repo() -> MockChurnRepo:
    return MockChurnRepo()


@pytest.fixture
def rules() -> MockRules:
    return MockRules()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Temporary SQLite database with the schema applied."""
    path = str(tmp_path / "studio.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path
