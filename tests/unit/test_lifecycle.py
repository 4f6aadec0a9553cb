"""
Tests for lifecycle bucketing by local civil date.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from studio_pipeline.domain.lifecycle import LifecycleConfig, bucket_for, parse_civil_date


class TestParseCivilDate:
    def test_iso_string(self) -> None:
        assert parse_civil_date("2026-03-11") == date(2026, 3, 11)

    def test_whitespace_trimmed(self) -> None:
        assert parse_civil_date(" 2026-03-11 ") == date(2026, 3, 11)

    @pytest.mark.parametrize("raw", [None, "", "  ", "03/11/2026", "2026-13-01", "tomorrow"])
    def test_unparseable_is_none(self, raw: str | None) -> None:
        assert parse_civil_date(raw) is None

    def test_date_passthrough(self) -> None:
        assert parse_civil_date(date(2026, 1, 2)) == date(2026, 1, 2)

    def test_datetime_keeps_its_own_day(self) -> None:
        assert parse_civil_date(datetime(2026, 1, 2, 23, 59)) == date(2026, 1, 2)


class TestBucketFor:
    def test_today(self, today: date) -> None:
        assert bucket_for(today.isoformat(), today) == "today"

    def test_yesterday_is_past(self, today: date) -> None:
        assert bucket_for((today - timedelta(days=1)).isoformat(), today) == "past"

    def test_tomorrow_is_week(self, today: date) -> None:
        assert bucket_for((today + timedelta(days=1)).isoformat(), today) == "week"

    def test_window_edge_inclusive(self, today: date) -> None:
        assert bucket_for(today + timedelta(days=7), today) == "week"
        assert bucket_for(today + timedelta(days=8), today) == "future"

    def test_missing_is_unknown(self, today: date) -> None:
        assert bucket_for(None, today) == "unknown"
        assert bucket_for("not a date", today) == "unknown"

    def test_custom_window(self, today: date) -> None:
        config = LifecycleConfig(week_window_days=3)
        assert bucket_for(today + timedelta(days=3), today, config) == "week"
        assert bucket_for(today + timedelta(days=4), today, config) == "future"

    def test_zero_window_has_no_week(self, today: date) -> None:
        config = LifecycleConfig(week_window_days=0)
        assert bucket_for(today + timedelta(days=1), today, config) == "future"

    def test_month_and_year_boundaries(self) -> None:
        assert bucket_for("2025-12-31", date(2026, 1, 1)) == "past"
        assert bucket_for("2026-03-01", date(2026, 2, 28)) == "week"
