"""Sales-pipeline state resolution and AMC ledger reconciliation."""

__version__ = "0.1.0"
