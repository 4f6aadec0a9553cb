"""
Tests for sales detection, sale dates and commission.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from studio_pipeline.domain.entities import Run
from studio_pipeline.domain.sales import (
    compute_commission,
    get_run_sale_date,
    is_amc_eligible_sale,
    is_membership_sale,
    is_sale_in_range,
)


class TestMembershipSale:
    @pytest.mark.parametrize("result", ["Premier + OTbeat", "ELITE", "Sold - basic"])
    def test_tiers(self, result: str) -> None:
        assert is_membership_sale(result)

    @pytest.mark.parametrize("result", [None, "", "No-show", "Didn't Buy"])
    def test_non_sales(self, result: str | None) -> None:
        assert not is_membership_sale(result)

    def test_amc_eligibility(self) -> None:
        assert is_amc_eligible_sale("Premier", "Instagram")
        assert is_amc_eligible_sale("Premier")
        assert not is_amc_eligible_sale("Premier", "VIP Class (Friend)")
        assert not is_amc_eligible_sale("No-show", "Instagram")


class TestSaleDate:
    def test_buy_date_first(self) -> None:
        run = Run(buy_date="2026-03-05", run_date="2026-03-01")
        assert get_run_sale_date(run) == date(2026, 3, 5)

    def test_falls_back_to_run_date(self) -> None:
        run = Run(buy_date="", run_date="2026-03-01")
        assert get_run_sale_date(run) == date(2026, 3, 1)

    def test_falls_back_to_created_at(self) -> None:
        run = Run(created_at=datetime(2026, 2, 20, 15, 0, tzinfo=UTC))
        assert get_run_sale_date(run) == date(2026, 2, 20)

    def test_in_range(self) -> None:
        run = Run(result="Elite", buy_date="2026-03-05")
        assert is_sale_in_range(run, date(2026, 3, 1), date(2026, 3, 31))
        assert is_sale_in_range(run, date(2026, 3, 5), date(2026, 3, 5))
        assert not is_sale_in_range(run, date(2026, 3, 6), None)
        assert is_sale_in_range(run, None, None)

    def test_non_sale_never_in_range(self) -> None:
        assert not is_sale_in_range(Run(result="No-show", buy_date="2026-03-05"), None, None)


class TestCommission:
    @pytest.mark.parametrize(
        ("membership", "amount"),
        [
            ("Premier + OTbeat", 15.0),
            ("Premier", 7.5),
            ("Elite + OTbeat", 12.0),
            ("Elite", 6.0),
            ("Basic + OTbeat", 3.0),
            ("Basic", 0.0),
            ("HRM Add-on (OTBeat)", 7.5),
        ],
    )
    def test_tier_table(self, membership: str, amount: float) -> None:
        assert compute_commission(membership) == amount

    def test_unknown_earns_nothing(self) -> None:
        assert compute_commission(None) == 0.0
        assert compute_commission("Class pack") == 0.0

    @pytest.mark.parametrize(
        ("membership", "amount"),
        [("Premier + OTBeat", 15.0), ("elite + otbeat", 12.0), ("  BASIC + OTBEAT ", 3.0)],
    )
    def test_tier_match_ignores_case(self, membership: str, amount: float) -> None:
        assert compute_commission(membership) == amount
