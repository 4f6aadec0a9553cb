"""
Lifecycle bucketing of a booking's class date relative to today.

Dates are compared as local civil dates, never as instants, so a booking can
not drift across midnight because of a timezone conversion.

Priority chain:
1. missing / unparseable -> unknown
2. equal to today -> today
3. before today -> past
4. within the next week_window_days (inclusive) -> week
5. otherwise -> future
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from studio_pipeline.domain.entities import LifecycleBucket

# --- Configuration ---


@dataclass(frozen=True)
class LifecycleConfig:
    """Lifecycle bucketing configuration."""

    week_window_days: int = 7


DEFAULT_CONFIG = LifecycleConfig()


def parse_civil_date(value: str | date | None) -> date | None:
    """
    Parse a YYYY-MM-DD civil date.

    Returns None for missing or unparseable values. datetime values are
    reduced to their own calendar date with no timezone conversion.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def bucket_for(
    class_date: str | date | None,
    today: date,
    config: LifecycleConfig = DEFAULT_CONFIG,
) -> LifecycleBucket:
    """Classify a class date into today/week/past/future/unknown."""
    day = parse_civil_date(class_date)
    if day is None:
        return "unknown"
    if day == today:
        return "today"
    if day < today:
        return "past"
    if day <= today + timedelta(days=config.week_window_days):
        return "week"
    return "future"
