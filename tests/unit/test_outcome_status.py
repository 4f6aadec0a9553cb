"""
Tests for booking status / intro result normalization and DB formatting.
"""

from __future__ import annotations

import pytest

from studio_pipeline.domain.outcome_status import (
    BookingStatus,
    IntroResult,
    format_booking_status_for_db,
    format_intro_result_for_db,
    is_membership_sale_result,
    map_result_to_booking_status,
    normalize_booking_status,
    normalize_intro_result,
)


class TestNormalizeBookingStatus:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Closed – Bought", BookingStatus.CLOSED_PURCHASED),
            ("closed - bought", BookingStatus.CLOSED_PURCHASED),
            ("Not interested", BookingStatus.NOT_INTERESTED),
            ("2nd Intro Scheduled", BookingStatus.SECOND_INTRO_SCHEDULED),
            ("No-show", BookingStatus.NO_SHOW),
            ("Canceled", BookingStatus.CANCELLED),
            ("Deleted (soft)", BookingStatus.DELETED_SOFT),
            ("Unscheduled", BookingStatus.ACTIVE),
        ],
    )
    def test_known_values(self, raw: str, expected: BookingStatus) -> None:
        assert normalize_booking_status(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "whatever"])
    def test_unknown_is_active(self, raw: str | None) -> None:
        assert normalize_booking_status(raw) == BookingStatus.ACTIVE


class TestNormalizeIntroResult:
    def test_tier_keywords(self) -> None:
        assert normalize_intro_result("Premier + OTbeat") == IntroResult.PREMIER
        assert normalize_intro_result("Elite") == IntroResult.ELITE
        assert normalize_intro_result("Sold - Basic") == IntroResult.BASIC

    def test_explicit_map_before_keywords(self) -> None:
        assert normalize_intro_result("didn't buy") == IntroResult.DIDNT_BUY
        assert normalize_intro_result("Booked 2nd intro") == IntroResult.SECOND_INTRO_SCHEDULED

    @pytest.mark.parametrize("raw", [None, "", "call later"])
    def test_unknown_is_unresolved(self, raw: str | None) -> None:
        assert normalize_intro_result(raw) == IntroResult.UNRESOLVED

    def test_membership_results(self) -> None:
        sales = {r for r in IntroResult if is_membership_sale_result(r)}
        assert sales == {IntroResult.PREMIER, IntroResult.ELITE, IntroResult.BASIC}


class TestMapping:
    @pytest.mark.parametrize("result", [IntroResult.PREMIER, IntroResult.ELITE, IntroResult.BASIC])
    def test_sale_closes_booking(self, result: IntroResult) -> None:
        assert map_result_to_booking_status(result) == BookingStatus.CLOSED_PURCHASED

    def test_not_interested_and_second_intro(self) -> None:
        assert (
            map_result_to_booking_status(IntroResult.NOT_INTERESTED)
            == BookingStatus.NOT_INTERESTED
        )
        assert (
            map_result_to_booking_status(IntroResult.SECOND_INTRO_SCHEDULED)
            == BookingStatus.SECOND_INTRO_SCHEDULED
        )

    @pytest.mark.parametrize(
        "result",
        [IntroResult.NO_SHOW, IntroResult.DIDNT_BUY, IntroResult.FOLLOW_UP_NEEDED],
    )
    def test_rebookable_results_stay_active(self, result: IntroResult) -> None:
        assert map_result_to_booking_status(result) == BookingStatus.ACTIVE


class TestFormatting:
    def test_booking_status_display(self) -> None:
        assert format_booking_status_for_db(BookingStatus.CLOSED_PURCHASED) == "Closed – Bought"
        assert format_booking_status_for_db(BookingStatus.NO_SHOW) == "Active"
        assert format_booking_status_for_db(BookingStatus.CANCELLED) == "Cancelled"

    def test_sale_stores_membership_type(self) -> None:
        assert format_intro_result_for_db(IntroResult.ELITE, "Elite + OTbeat") == "Elite + OTbeat"
        assert format_intro_result_for_db(IntroResult.ELITE) == "ELITE"

    def test_non_sale_display(self) -> None:
        assert format_intro_result_for_db(IntroResult.NO_SHOW) == "No-show"
        assert format_intro_result_for_db(IntroResult.DIDNT_BUY, "Premier") == "Didn't Buy"
