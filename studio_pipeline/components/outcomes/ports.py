"""
Outcomes component port definitions.
"""

from studio_pipeline.components.ledger.ports import RulesPort
from studio_pipeline.ports.clock import ClockPort
from studio_pipeline.ports.repo import BookingRepoPort, LedgerRepoPort, RunRepoPort

__all__ = ["BookingRepoPort", "ClockPort", "LedgerRepoPort", "RulesPort", "RunRepoPort"]
