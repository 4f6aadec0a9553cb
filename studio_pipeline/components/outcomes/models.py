"""
Outcomes component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OutcomeValidationError:
    """Outcome input validation error."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class OutcomeUpdateParams:
    """A staff edit of an intro's result."""

    booking_id: str
    member_name: str
    new_result: str
    edited_by: str
    previous_result: str | None = None  # read from the run when not given
    commission_amount: float | None = None
    lead_source: str | None = None
    run_id: str | None = None


@dataclass(frozen=True)
class OutcomeUpdateResult:
    """What the update changed."""

    success: bool
    run_id: str | None = None
    booking_status: str | None = None
    did_increment_amc: bool = False
    error: str | None = None


# --- Component I/O ---


@dataclass(frozen=True)
class ApplyOutcomeInput:
    """Input for applying an outcome edit."""

    params: OutcomeUpdateParams


@dataclass(frozen=True)
class ApplyOutcomeOutput:
    """Output for an outcome edit."""

    result: OutcomeUpdateResult | None
    errors: list[OutcomeValidationError] = field(default_factory=list)
    success: bool = True
