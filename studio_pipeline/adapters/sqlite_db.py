"""
SQLite Database Adapter.

Implements the storage ports (BookingRepoPort, RunRepoPort, LedgerRepoPort,
ChurnRepoPort) using SQLite. Schema lives in migrations/.

Invariants:
- I1: amc_log rows are only ever inserted
- I2: The unique index on amc_log.churn_event_id surfaces as
      DuplicateLedgerEntryError
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from typing import Any

from studio_pipeline.domain.entities import Booking, ChurnEvent, LedgerEntry, Run
from studio_pipeline.ports.repo import DuplicateLedgerEntryError

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def parse_bool(v: int | None) -> bool | None:
    """Nullable SQLite integer to bool."""
    return None if v is None else bool(v)


def fmt_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection
        if connection is not None:
            connection.row_factory = dict_factory

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Bookings
# -----------------------------------------------------------------------------


class SQLiteBookingRepo(SQLiteRepoBase):
    """SQLite implementation of BookingRepoPort."""

    def get_by_id(self, booking_id: str) -> Booking | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM intros_booked WHERE id = ?", (booking_id,)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def list_by_date_range(self, start: date | None, end: date | None) -> list[Booking]:
        query = "SELECT * FROM intros_booked WHERE 1=1"
        params: list[Any] = []
        if start is not None:
            query += " AND class_date >= ?"
            params.append(start.isoformat())
        if end is not None:
            query += " AND class_date <= ?"
            params.append(end.isoformat())
        query += " ORDER BY class_date, created_at"

        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def save(self, booking: Booking) -> Booking:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO intros_booked (
                    id, member_name, class_date, intro_time, is_vip,
                    booking_type_canon, vip_session_id, lead_source,
                    booking_status_canon, booking_status, deleted_at,
                    originating_booking_id, phone, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    member_name=excluded.member_name,
                    class_date=excluded.class_date,
                    intro_time=excluded.intro_time,
                    is_vip=excluded.is_vip,
                    booking_type_canon=excluded.booking_type_canon,
                    vip_session_id=excluded.vip_session_id,
                    lead_source=excluded.lead_source,
                    booking_status_canon=excluded.booking_status_canon,
                    booking_status=excluded.booking_status,
                    deleted_at=excluded.deleted_at,
                    originating_booking_id=excluded.originating_booking_id,
                    phone=excluded.phone
                """,
                (
                    booking.id,
                    booking.member_name,
                    booking.class_date,
                    booking.intro_time,
                    booking.is_vip,
                    booking.booking_type_canon,
                    booking.vip_session_id,
                    booking.lead_source,
                    booking.booking_status_canon,
                    booking.booking_status,
                    fmt_dt(booking.deleted_at),
                    booking.originating_booking_id,
                    booking.phone,
                    booking.created_at.isoformat(),
                ),
            )
            if self._should_close():
                conn.commit()
            return booking
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Booking:
        return Booking(
            id=row["id"],
            member_name=row["member_name"],
            class_date=row["class_date"],
            intro_time=row["intro_time"],
            is_vip=parse_bool(row["is_vip"]),
            booking_type_canon=row["booking_type_canon"],
            vip_session_id=row["vip_session_id"],
            lead_source=row["lead_source"],
            booking_status_canon=row["booking_status_canon"],
            booking_status=row["booking_status"],
            deleted_at=parse_dt(row["deleted_at"]),
            originating_booking_id=row["originating_booking_id"],
            phone=row["phone"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Runs
# -----------------------------------------------------------------------------


class SQLiteRunRepo(SQLiteRepoBase):
    """SQLite implementation of RunRepoPort."""

    def get_by_id(self, run_id: str) -> Run | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM intros_run WHERE id = ?", (run_id,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def get_latest_for_booking(self, booking_id: str) -> Run | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                """
                SELECT * FROM intros_run
                WHERE linked_intro_booked_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT 1
                """,
                (booking_id,),
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def list_all(self) -> list[Run]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM intros_run ORDER BY created_at, rowid").fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def save(self, run: Run) -> Run:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO intros_run (
                    id, linked_intro_booked_id, member_name, run_date, result,
                    result_canon, is_vip, vip_session_id, lead_source, buy_date,
                    commission_amount, amc_incremented_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    linked_intro_booked_id=excluded.linked_intro_booked_id,
                    member_name=excluded.member_name,
                    run_date=excluded.run_date,
                    result=excluded.result,
                    result_canon=excluded.result_canon,
                    is_vip=excluded.is_vip,
                    vip_session_id=excluded.vip_session_id,
                    lead_source=excluded.lead_source,
                    buy_date=excluded.buy_date,
                    commission_amount=excluded.commission_amount,
                    amc_incremented_at=excluded.amc_incremented_at
                """,
                (
                    run.id,
                    run.linked_intro_booked_id,
                    run.member_name,
                    run.run_date,
                    run.result,
                    run.result_canon,
                    run.is_vip,
                    run.vip_session_id,
                    run.lead_source,
                    run.buy_date,
                    run.commission_amount,
                    fmt_dt(run.amc_incremented_at),
                    run.created_at.isoformat(),
                ),
            )
            if self._should_close():
                conn.commit()
            return run
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Run:
        return Run(
            id=row["id"],
            linked_intro_booked_id=row["linked_intro_booked_id"],
            member_name=row["member_name"],
            run_date=row["run_date"],
            result=row["result"],
            result_canon=row["result_canon"],
            is_vip=parse_bool(row["is_vip"]),
            vip_session_id=row["vip_session_id"],
            lead_source=row["lead_source"],
            buy_date=row["buy_date"],
            commission_amount=row["commission_amount"] or 0.0,
            amc_incremented_at=parse_dt(row["amc_incremented_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# AMC Ledger
# -----------------------------------------------------------------------------


class SQLiteLedgerRepo(SQLiteRepoBase):
    """SQLite implementation of LedgerRepoPort (append-only)."""

    def latest(self) -> LedgerEntry | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM amc_log ORDER BY created_at DESC, rowid DESC LIMIT 1"
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def append(self, entry: LedgerEntry) -> LedgerEntry:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO amc_log (
                    id, logged_date, amc_value, note, created_by,
                    created_at, churn_event_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.logged_date.isoformat(),
                    entry.amc_value,
                    entry.note,
                    entry.created_by,
                    entry.created_at.isoformat(),
                    entry.churn_event_id,
                ),
            )
            if self._should_close():
                conn.commit()
            return entry
        except sqlite3.IntegrityError as e:
            if entry.churn_event_id and "churn_event_id" in str(e):
                raise DuplicateLedgerEntryError(entry.churn_event_id) from e
            raise
        finally:
            if self._should_close():
                conn.close()

    def list_notes(self, prefix: str) -> list[str]:
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT note FROM amc_log WHERE note LIKE ? ESCAPE '\\'",
                (escaped + "%",),
            ).fetchall()
            return [r["note"] for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def get_by_churn_event(self, churn_event_id: str) -> LedgerEntry | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM amc_log WHERE churn_event_id = ?", (churn_event_id,)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def list_all(self) -> list[LedgerEntry]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM amc_log ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> LedgerEntry:
        return LedgerEntry(
            id=row["id"],
            logged_date=date.fromisoformat(row["logged_date"]),
            amc_value=row["amc_value"],
            note=row["note"],
            created_by=row["created_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
            churn_event_id=row["churn_event_id"],
        )


# -----------------------------------------------------------------------------
# Churn Events
# -----------------------------------------------------------------------------


class SQLiteChurnRepo(SQLiteRepoBase):
    """SQLite implementation of ChurnRepoPort."""

    def list_effective(self, as_of: date) -> list[ChurnEvent]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM churn_log
                WHERE effective_date <= ?
                ORDER BY effective_date, created_at
                """,
                (as_of.isoformat(),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def save(self, event: ChurnEvent) -> ChurnEvent:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO churn_log (
                    id, churn_count, effective_date, note, created_by, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    event.id,
                    event.churn_count,
                    event.effective_date.isoformat(),
                    event.note,
                    event.created_by,
                    event.created_at.isoformat(),
                ),
            )
            if self._should_close():
                conn.commit()
            return event
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> ChurnEvent:
        return ChurnEvent(
            id=row["id"],
            churn_count=row["churn_count"],
            effective_date=date.fromisoformat(row["effective_date"]),
            note=row["note"],
            created_by=row["created_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
