"""
Ledger component - AMC ledger reconciliation.

Entry points wrap LedgerReconciler for callers that work with plain input
and output models (CLI, sale logging, page-load hooks).

Invariants:
- I1: Auto-adjustments never fail the caller; failures come back as status
- I2: Re-running reconciliation for the same churn events is a no-op
- I3: No auto-adjustment before the ledger has a baseline
"""

from __future__ import annotations

from ._impl import (
    AdjustmentResult,
    LedgerConfig,
    LedgerReconciler,
)
from .models import (
    CurrentValueOutput,
    GetCurrentValueInput,
    LedgerAdjustmentOutput,
    LedgerValidationError,
    LogChurnInput,
    LogChurnOutput,
    ManualAdjustmentInput,
    ReconcileChurnInput,
    ReconcileOutput,
    RecordChurnInput,
    RecordSaleInput,
    SeedBaselineInput,
)
from .ports import ChurnRepoPort, ClockPort, LedgerRepoPort, RulesPort


def _build_config(rules: RulesPort | None) -> LedgerConfig:
    """Build ledger config from rules port."""
    if rules is None:
        return LedgerConfig()

    return LedgerConfig(
        auto_churn_prefix=rules.get_auto_churn_prefix(),
        churn_id_prefix_length=rules.get_churn_id_prefix_length(),
        default_author=rules.get_default_author(),
    )


def _create_service(
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    churn_repo: ChurnRepoPort | None,
    rules: RulesPort | None,
) -> LedgerReconciler:
    """Create ledger service from ports."""
    return LedgerReconciler(
        ledger_repo=ledger_repo,
        clock=clock,
        churn_repo=churn_repo,
        config=_build_config(rules),
    )


def _convert_result(result: AdjustmentResult) -> LedgerAdjustmentOutput:
    errors = []
    if result.error:
        errors.append(LedgerValidationError(code="storage_error", message=result.error))
    return LedgerAdjustmentOutput(
        status=result.status.value,
        entry=result.entry,
        errors=errors,
        success=not errors,
    )


def _invalid(code: str, message: str, field: str) -> list[LedgerValidationError]:
    return [LedgerValidationError(code=code, message=message, field=field)]


# --- Component Entry Points ---


def run_record_sale(
    inp: RecordSaleInput,
    *,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> LedgerAdjustmentOutput:
    """
    Add one member to the AMC after a sale.

    Returns status "no_baseline" without writing when the ledger is empty.
    """
    service = _create_service(ledger_repo, clock, None, rules)
    result = service.record_sale_adjustment(inp.person_name, inp.membership_type, inp.author)
    return _convert_result(result)


def run_record_churn(
    inp: RecordChurnInput,
    *,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> LedgerAdjustmentOutput:
    """Subtract churned members from the AMC."""
    if inp.count <= 0:
        return LedgerAdjustmentOutput(
            status="invalid",
            errors=_invalid("count_not_positive", "Churn count must be positive", "count"),
            success=False,
        )

    service = _create_service(ledger_repo, clock, None, rules)
    result = service.record_churn_adjustment(
        count=inp.count,
        note=inp.note,
        author=inp.author,
        effective_date=inp.effective_date,
    )
    return _convert_result(result)


def run_log_churn(
    inp: LogChurnInput,
    *,
    ledger_repo: LedgerRepoPort,
    churn_repo: ChurnRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> LogChurnOutput:
    """Store a churn event and apply it if it is already effective."""
    if inp.count <= 0:
        return LogChurnOutput(
            event=None,
            errors=_invalid("count_not_positive", "Churn count must be positive", "count"),
            success=False,
        )

    service = _create_service(ledger_repo, clock, churn_repo, rules)
    event, result = service.log_churn(
        count=inp.count,
        effective_date=inp.effective_date,
        author=inp.author,
        note=inp.note,
    )
    return LogChurnOutput(
        event=event,
        adjustment=_convert_result(result) if result is not None else None,
    )


def run_reconcile(
    inp: ReconcileChurnInput,
    *,
    ledger_repo: LedgerRepoPort,
    churn_repo: ChurnRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> ReconcileOutput:
    """Apply every effective churn event that is not yet in the ledger."""
    service = _create_service(ledger_repo, clock, churn_repo, rules)
    result = service.reconcile_effective_churn(inp.today)

    errors = [
        LedgerValidationError(
            code="storage_error",
            message=f"Churn event {r.churn_event_id}: {r.error}",
        )
        for r in result.results
        if r.error
    ]
    if result.error:
        errors.insert(
            0, LedgerValidationError(code="storage_error", message=f"Churn events: {result.error}")
        )
    return ReconcileOutput(
        total_events=result.total_events,
        applied=result.applied,
        already_applied=result.already_applied,
        no_baseline=result.no_baseline,
        failed=result.failed,
        entries=tuple(r.entry for r in result.results if r.entry is not None),
        errors=errors,
        success=not errors,
    )


def run_manual_adjustment(
    inp: ManualAdjustmentInput,
    *,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> LedgerAdjustmentOutput:
    """Record a human adjustment relative to the current value."""
    service = _create_service(ledger_repo, clock, None, rules)
    entry = service.record_manual_adjustment(
        delta=inp.delta,
        author=inp.author,
        note=inp.note,
        logged_date=inp.logged_date,
    )
    return LedgerAdjustmentOutput(status="applied", entry=entry)


def run_seed_baseline(
    inp: SeedBaselineInput,
    *,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> LedgerAdjustmentOutput:
    """Record an absolute AMC value."""
    if inp.value < 0:
        return LedgerAdjustmentOutput(
            status="invalid",
            errors=_invalid("value_negative", "AMC value cannot be negative", "value"),
            success=False,
        )

    service = _create_service(ledger_repo, clock, None, rules)
    entry = service.seed_baseline(
        value=inp.value,
        author=inp.author,
        note=inp.note,
        logged_date=inp.logged_date,
    )
    return LedgerAdjustmentOutput(status="applied", entry=entry)


def run_current_value(
    inp: GetCurrentValueInput,
    *,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> CurrentValueOutput:
    """Read the current AMC and the distance to the studio target."""
    service = _create_service(ledger_repo, clock, None, rules)
    value = service.current_value()
    target = rules.get_amc_target() if rules is not None else None

    remaining = None
    if value is not None and target is not None:
        remaining = max(target - value, 0)

    return CurrentValueOutput(value=value, target=target, remaining=remaining)


def run(
    inp: (
        RecordSaleInput
        | RecordChurnInput
        | LogChurnInput
        | ReconcileChurnInput
        | ManualAdjustmentInput
        | SeedBaselineInput
        | GetCurrentValueInput
    ),
    *,
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    churn_repo: ChurnRepoPort | None = None,
    rules: RulesPort | None = None,
) -> LedgerAdjustmentOutput | LogChurnOutput | ReconcileOutput | CurrentValueOutput:
    """
    Main entry point for the ledger component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, RecordSaleInput):
        return run_record_sale(inp, ledger_repo=ledger_repo, clock=clock, rules=rules)
    elif isinstance(inp, RecordChurnInput):
        return run_record_churn(inp, ledger_repo=ledger_repo, clock=clock, rules=rules)
    elif isinstance(inp, ManualAdjustmentInput):
        return run_manual_adjustment(inp, ledger_repo=ledger_repo, clock=clock, rules=rules)
    elif isinstance(inp, SeedBaselineInput):
        return run_seed_baseline(inp, ledger_repo=ledger_repo, clock=clock, rules=rules)
    elif isinstance(inp, GetCurrentValueInput):
        return run_current_value(inp, ledger_repo=ledger_repo, clock=clock, rules=rules)

    if churn_repo is None:
        raise ValueError(f"{type(inp).__name__} requires a churn repository")

    if isinstance(inp, LogChurnInput):
        return run_log_churn(
            inp, ledger_repo=ledger_repo, churn_repo=churn_repo, clock=clock, rules=rules
        )
    elif isinstance(inp, ReconcileChurnInput):
        return run_reconcile(
            inp, ledger_repo=ledger_repo, churn_repo=churn_repo, clock=clock, rules=rules
        )
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
