"""
Sales detection, sale dates and commission rules.

Every metric that counts sales or pays commission goes through these helpers
so that the purchase-date fallback chain and the tier table stay consistent.
"""

from __future__ import annotations

from datetime import date

from studio_pipeline.domain.entities import Run
from studio_pipeline.domain.lifecycle import parse_civil_date

MEMBERSHIP_KEYWORDS: tuple[str, ...] = ("premier", "elite", "basic")

# Commission per standard intro membership tier (with / without OTbeat)
STANDARD_MEMBERSHIP_TIERS: dict[str, float] = {
    "Premier + OTbeat": 15.00,
    "Premier": 7.50,
    "Elite + OTbeat": 12.00,
    "Elite": 6.00,
    "Basic + OTbeat": 3.00,
    "Basic": 0.00,
}

_ADD_ON_COMMISSIONS: dict[str, float] = {
    "HRM Add-on (OTBeat)": 7.50,
}

_COMMISSION_BY_KEY: dict[str, float] = {
    name.strip().lower(): amount
    for name, amount in {**STANDARD_MEMBERSHIP_TIERS, **_ADD_ON_COMMISSIONS}.items()
}


def is_membership_sale(result: str | None) -> bool:
    """True if a free-text result names a membership tier."""
    lower = (result or "").lower()
    return any(keyword in lower for keyword in MEMBERSHIP_KEYWORDS)


def is_amc_eligible_sale(membership_type: str | None, lead_source: str | None = None) -> bool:
    """A sale moves AMC only if it is a membership and not from a VIP event."""
    if not is_membership_sale(membership_type):
        return False
    return "vip" not in (lead_source or "").lower()


def get_run_sale_date(run: Run) -> date:
    """Effective sale date: buy_date, then run_date, then creation date."""
    for candidate in (run.buy_date, run.run_date):
        parsed = parse_civil_date(candidate)
        if parsed is not None:
            return parsed
    return run.created_at.date()


def is_sale_in_range(run: Run, start: date | None, end: date | None) -> bool:
    """
    True if the run is a sale whose effective date is within [start, end].

    Both bounds None means all time.
    """
    if not is_membership_sale(run.result):
        return False
    sale_date = get_run_sale_date(run)
    if start is not None and sale_date < start:
        return False
    if end is not None and sale_date > end:
        return False
    return True


def compute_commission(membership_type: str | None) -> float:
    """Commission for a membership type, ignoring case; unknown types earn nothing."""
    if not membership_type:
        return 0.0
    return _COMMISSION_BY_KEY.get(membership_type.strip().lower(), 0.0)
