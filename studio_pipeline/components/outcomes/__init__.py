"""
Outcomes component - intro result edits and their side effects.
"""

from ._impl import OutcomeUpdateService, create_outcome_update_service
from .component import run, run_apply_outcome
from .models import (
    ApplyOutcomeInput,
    ApplyOutcomeOutput,
    OutcomeUpdateParams,
    OutcomeUpdateResult,
    OutcomeValidationError,
)

__all__ = [
    # Entry points
    "run",
    "run_apply_outcome",
    # Models
    "ApplyOutcomeInput",
    "ApplyOutcomeOutput",
    "OutcomeUpdateParams",
    "OutcomeUpdateResult",
    "OutcomeValidationError",
    # _impl re-exports
    "OutcomeUpdateService",
    "create_outcome_update_service",
]
