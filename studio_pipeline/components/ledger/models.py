"""
Ledger component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from studio_pipeline.domain.entities import ChurnEvent, LedgerEntry

# --- Validation Error ---


@dataclass(frozen=True)
class LedgerValidationError:
    """Ledger input validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class RecordSaleInput:
    """Input for the +1 adjustment after a membership sale."""

    person_name: str
    membership_type: str
    author: str


@dataclass(frozen=True)
class RecordChurnInput:
    """Input for a direct churn adjustment."""

    count: int
    author: str
    note: str | None = None
    effective_date: date | None = None


@dataclass(frozen=True)
class LogChurnInput:
    """Input for storing a churn event (applied now if already effective)."""

    count: int
    effective_date: date
    author: str
    note: str | None = None


@dataclass(frozen=True)
class ReconcileChurnInput:
    """Input for a reconciliation pass; today defaults to the clock."""

    today: date | None = None


@dataclass(frozen=True)
class ManualAdjustmentInput:
    """Input for a human adjustment relative to the current value."""

    delta: int
    author: str
    note: str | None = None
    logged_date: date | None = None


@dataclass(frozen=True)
class SeedBaselineInput:
    """Input for an absolute baseline entry."""

    value: int
    author: str
    note: str | None = None
    logged_date: date | None = None


@dataclass(frozen=True)
class GetCurrentValueInput:
    """Input for reading the current AMC."""

    pass


# --- Output Models ---


@dataclass(frozen=True)
class LedgerAdjustmentOutput:
    """Output for a single ledger write."""

    status: str
    entry: LedgerEntry | None = None
    errors: list[LedgerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class LogChurnOutput:
    """Output for logging a churn event."""

    event: ChurnEvent | None
    adjustment: LedgerAdjustmentOutput | None = None
    errors: list[LedgerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ReconcileOutput:
    """Output for a churn reconciliation pass."""

    total_events: int
    applied: int
    already_applied: int
    no_baseline: int
    failed: int
    entries: tuple[LedgerEntry, ...] = ()
    errors: list[LedgerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class CurrentValueOutput:
    """Output for the current AMC read."""

    value: int | None
    target: int | None = None
    remaining: int | None = None
    errors: list[LedgerValidationError] = field(default_factory=list)
    success: bool = True
