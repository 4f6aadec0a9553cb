"""
Outcomes component - apply an intro result edit end to end.

Invariants:
- I1: The booking status always follows the run result
- I2: A run adds to the AMC ledger at most once
"""

from __future__ import annotations

from studio_pipeline.components.ledger import LedgerConfig, LedgerReconciler

from ._impl import OutcomeUpdateService
from .models import ApplyOutcomeInput, ApplyOutcomeOutput, OutcomeValidationError
from .ports import BookingRepoPort, ClockPort, LedgerRepoPort, RulesPort, RunRepoPort


def _validate(inp: ApplyOutcomeInput) -> list[OutcomeValidationError]:
    errors = []
    if not inp.params.booking_id and not inp.params.run_id:
        errors.append(
            OutcomeValidationError(
                code="missing_target",
                message="Either booking_id or run_id is required",
                field="booking_id",
            )
        )
    if not inp.params.new_result.strip():
        errors.append(
            OutcomeValidationError(
                code="result_required", message="New result is required", field="new_result"
            )
        )
    return errors


def run_apply_outcome(
    inp: ApplyOutcomeInput,
    *,
    booking_repo: BookingRepoPort,
    run_repo: RunRepoPort,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> ApplyOutcomeOutput:
    """Apply an outcome edit to run, booking and AMC ledger."""
    errors = _validate(inp)
    if errors:
        return ApplyOutcomeOutput(result=None, errors=errors, success=False)

    config = LedgerConfig()
    if rules is not None:
        config = LedgerConfig(
            auto_churn_prefix=rules.get_auto_churn_prefix(),
            churn_id_prefix_length=rules.get_churn_id_prefix_length(),
            default_author=rules.get_default_author(),
        )

    ledger = LedgerReconciler(ledger_repo=ledger_repo, clock=clock, config=config)
    service = OutcomeUpdateService(
        booking_repo=booking_repo, run_repo=run_repo, ledger=ledger, clock=clock
    )
    result = service.apply(inp.params)

    if not result.success:
        return ApplyOutcomeOutput(
            result=result,
            errors=[OutcomeValidationError(code="update_failed", message=result.error or "")],
            success=False,
        )
    return ApplyOutcomeOutput(result=result)


def run(
    inp: ApplyOutcomeInput,
    *,
    booking_repo: BookingRepoPort,
    run_repo: RunRepoPort,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> ApplyOutcomeOutput:
    """
    Main entry point for the outcomes component.
    """
    if isinstance(inp, ApplyOutcomeInput):
        return run_apply_outcome(
            inp,
            booking_repo=booking_repo,
            run_repo=run_repo,
            ledger_repo=ledger_repo,
            clock=clock,
            rules=rules,
        )
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
