"""Port interfaces (Protocols); implementations live in adapters."""

from studio_pipeline.ports.clock import ClockPort
from studio_pipeline.ports.repo import (
    BookingRepoPort,
    ChurnRepoPort,
    DuplicateLedgerEntryError,
    LedgerRepoPort,
    RunRepoPort,
)

__all__ = [
    "BookingRepoPort",
    "ChurnRepoPort",
    "ClockPort",
    "DuplicateLedgerEntryError",
    "LedgerRepoPort",
    "RunRepoPort",
]
