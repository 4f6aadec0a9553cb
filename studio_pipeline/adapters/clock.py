"""
Studio clock adapters.

Implements ClockPort. "Today" is the civil date in the studio's timezone,
so an intro at 23:30 local time still counts as today after UTC midnight.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


class SystemClock:
    """Clock reading the wall time in a fixed IANA timezone."""

    def __init__(self, tz_name: str = "America/New_York") -> None:
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    def now_local(self) -> datetime:
        return datetime.now(self._tz)

    def today(self) -> date:
        return self.now_local().date()

    @property
    def timezone_name(self) -> str:
        return self._tz_name


class FixedClock:
    """
    Clock that returns a fixed date.

    Useful for deterministic testing.
    """

    def __init__(self, day: date) -> None:
        self._day = day

    def today(self) -> date:
        return self._day

    def advance(self, days: int = 1) -> None:
        """Move the frozen date forward (for testing)."""
        self._day = self._day + timedelta(days=days)


def create_clock(tz_name: str = "America/New_York") -> SystemClock:
    """Factory function to create the studio clock."""
    return SystemClock(tz_name)
