"""
Ledger component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from studio_pipeline.ports.clock import ClockPort
from studio_pipeline.ports.repo import ChurnRepoPort, LedgerRepoPort


class RulesPort(Protocol):
    """Port for ledger rules configuration."""

    def get_auto_churn_prefix(self) -> str:
        """Note prefix shared by all automatic churn entries."""
        ...

    def get_churn_id_prefix_length(self) -> int:
        """How many characters of the churn event id go into its note."""
        ...

    def get_default_author(self) -> str:
        """Author recorded when a churn event has none."""
        ...

    def get_amc_target(self) -> int | None:
        """Studio AMC goal, if configured."""
        ...


__all__ = ["ChurnRepoPort", "ClockPort", "LedgerRepoPort", "RulesPort"]
