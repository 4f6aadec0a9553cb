"""
Clock interface.

Lifecycle bucketing compares local civil dates, so the only thing the pipeline
needs from a clock is "today" in the studio's timezone. Injected everywhere
so tests can simulate any date.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol


class ClockPort(Protocol):
    """Clock interface."""

    def today(self) -> date:
        """Get the current local civil date."""
        ...
