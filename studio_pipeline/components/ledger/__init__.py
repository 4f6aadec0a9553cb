"""
Ledger component - AMC ledger reconciliation against sales and churn.
"""

from ._impl import (
    AdjustmentResult,
    AdjustmentStatus,
    LedgerConfig,
    LedgerReconciler,
    ReconcileResult,
    churn_note,
    create_ledger_reconciler,
    expected_churn_note,
    known_churn_notes,
    manual_note,
    sale_note,
)
from .component import (
    run,
    run_current_value,
    run_log_churn,
    run_manual_adjustment,
    run_reconcile,
    run_record_churn,
    run_record_sale,
    run_seed_baseline,
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

__all__ = [
    # Entry points
    "run",
    "run_current_value",
    "run_log_churn",
    "run_manual_adjustment",
    "run_reconcile",
    "run_record_churn",
    "run_record_sale",
    "run_seed_baseline",
    # Input models
    "GetCurrentValueInput",
    "LogChurnInput",
    "ManualAdjustmentInput",
    "ReconcileChurnInput",
    "RecordChurnInput",
    "RecordSaleInput",
    "SeedBaselineInput",
    # Output models
    "CurrentValueOutput",
    "LedgerAdjustmentOutput",
    "LedgerValidationError",
    "LogChurnOutput",
    "ReconcileOutput",
    # Ports
    "ChurnRepoPort",
    "ClockPort",
    "LedgerRepoPort",
    "RulesPort",
    # _impl re-exports
    "AdjustmentResult",
    "AdjustmentStatus",
    "LedgerConfig",
    "LedgerReconciler",
    "ReconcileResult",
    "churn_note",
    "create_ledger_reconciler",
    "expected_churn_note",
    "known_churn_notes",
    "manual_note",
    "sale_note",
]
