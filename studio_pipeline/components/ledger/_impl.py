"""
LedgerReconciler - keeps the AMC ledger in step with sales and churn.

The ledger is an append-only list of absolute values; the current AMC is the
value of the most recently created entry. Sales add one member, churn events
subtract their count once they become effective.

Invariants:
- I1: Entries are only ever appended, never updated or deleted
- I2: Each churn event produces at most one entry, however often
      reconciliation runs (provenance note + churn_event_id link)
- I3: Auto-adjustments never fabricate a baseline; an empty ledger is a no-op
- I4: A failed adjustment is logged and isolated; callers never see it raise

Key behaviors:
- reconcile_effective_churn re-reads the ledger right before each write
- Storage rejects a second entry for the same churn_event_id, which closes
  the window between two concurrent passes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from studio_pipeline.domain.entities import ChurnEvent, LedgerEntry
from studio_pipeline.ports.clock import ClockPort
from studio_pipeline.ports.repo import (
    ChurnRepoPort,
    DuplicateLedgerEntryError,
    LedgerRepoPort,
)

logger = logging.getLogger(__name__)

# --- Configuration ---


@dataclass(frozen=True)
class LedgerConfig:
    """AMC ledger configuration."""

    auto_churn_prefix: str = "Auto: Churn"
    churn_id_prefix_length: int = 8
    default_author: str = "System"


DEFAULT_CONFIG = LedgerConfig()


# --- Results ---


class AdjustmentStatus(Enum):
    """Outcome of a single ledger adjustment."""

    APPLIED = "applied"
    NO_BASELINE = "no_baseline"  # ledger not seeded yet
    ALREADY_APPLIED = "already_applied"  # idempotency
    FAILED = "failed"


@dataclass
class AdjustmentResult:
    """Result of one adjustment attempt."""

    status: AdjustmentStatus
    entry: LedgerEntry | None = None
    churn_event_id: str | None = None
    error: str | None = None


@dataclass
class ReconcileResult:
    """Result of a churn reconciliation pass."""

    total_events: int = 0
    applied: int = 0
    already_applied: int = 0
    no_baseline: int = 0
    failed: int = 0
    results: list[AdjustmentResult] = field(default_factory=list)
    error: str | None = None  # events could not be loaded

    def add(self, result: AdjustmentResult) -> None:
        self.results.append(result)
        self.total_events += 1
        if result.status == AdjustmentStatus.APPLIED:
            self.applied += 1
        elif result.status == AdjustmentStatus.ALREADY_APPLIED:
            self.already_applied += 1
        elif result.status == AdjustmentStatus.NO_BASELINE:
            self.no_baseline += 1
        else:
            self.failed += 1


# --- Provenance Notes ---


def sale_note(person_name: str, membership_type: str) -> str:
    return f"Auto: {person_name} purchased {membership_type}"


def churn_note(count: int, prefix: str = DEFAULT_CONFIG.auto_churn_prefix) -> str:
    return f"{prefix} logged ({count} members)"


def expected_churn_note(event: ChurnEvent, config: LedgerConfig = DEFAULT_CONFIG) -> str:
    """Deterministic provenance note for an auto-applied churn event."""
    return _tagged_churn_note(event, config.auto_churn_prefix, config.churn_id_prefix_length)


def _tagged_churn_note(event: ChurnEvent, prefix: str, id_length: int) -> str:
    return f"{churn_note(event.churn_count, prefix)} [{event.id[:id_length]}]"


def known_churn_notes(event: ChurnEvent, config: LedgerConfig = DEFAULT_CONFIG) -> set[str]:
    """
    Every note an earlier pass may have written for this event.

    Covers the current settings and the default ones, so rows written before
    a settings change are still recognised.
    """
    return {
        _tagged_churn_note(event, prefix, length)
        for prefix in (config.auto_churn_prefix, DEFAULT_CONFIG.auto_churn_prefix)
        for length in (config.churn_id_prefix_length, DEFAULT_CONFIG.churn_id_prefix_length)
    }


def manual_note(delta: int) -> str:
    sign = "+" if delta > 0 else ""
    return f"Manual adjustment ({sign}{delta})"


# --- Service ---


class LedgerReconciler:
    """
    AMC ledger service.

    Storage and clock are injected; the service holds no state of its own.
    """

    def __init__(
        self,
        ledger_repo: LedgerRepoPort,
        clock: ClockPort,
        churn_repo: ChurnRepoPort | None = None,
        config: LedgerConfig | None = None,
    ) -> None:
        self._ledger = ledger_repo
        self._churn = churn_repo
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    # --- Reads ---

    def current_value(self) -> int | None:
        """Value of the most recently created entry, None if never seeded."""
        latest = self._ledger.latest()
        return latest.amc_value if latest else None

    # --- Auto adjustments ---

    def record_sale_adjustment(
        self,
        person_name: str,
        membership_type: str,
        author: str,
    ) -> AdjustmentResult:
        """Append current + 1 for a membership sale."""
        try:
            return self._append_relative(
                delta=1,
                note=sale_note(person_name, membership_type),
                author=author,
                logged_date=self._clock.today(),
            )
        except Exception as e:
            logger.exception("AMC sale adjustment failed for %s", person_name)
            return AdjustmentResult(status=AdjustmentStatus.FAILED, error=str(e))

    def record_churn_adjustment(
        self,
        count: int,
        note: str | None,
        author: str,
        effective_date: date | None = None,
        churn_event_id: str | None = None,
    ) -> AdjustmentResult:
        """Append current - count, logged on the churn's effective date."""
        try:
            return self._append_relative(
                delta=-count,
                note=note or churn_note(count, self._config.auto_churn_prefix),
                author=author,
                logged_date=effective_date or self._clock.today(),
                churn_event_id=churn_event_id,
            )
        except DuplicateLedgerEntryError:
            logger.info("Churn event %s already reflected in AMC ledger", churn_event_id)
            return AdjustmentResult(
                status=AdjustmentStatus.ALREADY_APPLIED, churn_event_id=churn_event_id
            )
        except Exception as e:
            logger.exception("AMC churn adjustment failed (%s members)", count)
            return AdjustmentResult(
                status=AdjustmentStatus.FAILED, churn_event_id=churn_event_id, error=str(e)
            )

    def reconcile_effective_churn(self, today: date | None = None) -> ReconcileResult:
        """
        Apply every effective churn event not yet reflected in the ledger.

        Safe to call on every page load: events already applied are detected
        by their event link or their provenance note and skipped.
        """
        result = ReconcileResult()
        if self._churn is None:
            return result

        as_of = today or self._clock.today()
        try:
            events = self._churn.list_effective(as_of)
        except Exception as e:
            logger.exception("Could not load churn events effective by %s", as_of)
            result.error = str(e)
            return result

        for event in events:
            result.add(self._reconcile_event(event))

        if result.applied or result.failed:
            logger.info(
                "Churn reconciliation: %d applied, %d already applied, %d failed",
                result.applied,
                result.already_applied,
                result.failed,
            )
        return result

    def log_churn(
        self,
        count: int,
        effective_date: date,
        author: str,
        note: str | None = None,
    ) -> tuple[ChurnEvent, AdjustmentResult | None]:
        """
        Store a churn event; apply it right away if it is already effective.

        Future-dated events are left for a later reconciliation pass.
        """
        if self._churn is None:
            raise RuntimeError("Churn repository not configured")

        event = self._churn.save(
            ChurnEvent(
                churn_count=count,
                effective_date=effective_date,
                note=note,
                created_by=author,
            )
        )
        if effective_date > self._clock.today():
            return event, None
        return event, self._reconcile_event(event)

    # --- Manual adjustments ---

    def record_manual_adjustment(
        self,
        delta: int,
        author: str,
        note: str | None = None,
        logged_date: date | None = None,
    ) -> LedgerEntry:
        """
        Human adjustment relative to the current value.

        An empty ledger counts as 0. Storage errors propagate to the caller.
        """
        current = self.current_value() or 0
        return self._ledger.append(
            LedgerEntry(
                logged_date=logged_date or self._clock.today(),
                amc_value=current + delta,
                note=note or manual_note(delta),
                created_by=author,
            )
        )

    def seed_baseline(
        self,
        value: int,
        author: str,
        note: str | None = None,
        logged_date: date | None = None,
    ) -> LedgerEntry:
        """Append an absolute value, e.g. the first count from the front desk."""
        return self._ledger.append(
            LedgerEntry(
                logged_date=logged_date or self._clock.today(),
                amc_value=value,
                note=note or "Baseline",
                created_by=author,
            )
        )

    # --- Internals ---

    def _is_applied(self, event: ChurnEvent) -> bool:
        if self._ledger.get_by_churn_event(event.id) is not None:
            return True
        candidates = known_churn_notes(event, self._config)
        prefixes = {self._config.auto_churn_prefix, DEFAULT_CONFIG.auto_churn_prefix}
        return any(
            note in candidates for prefix in prefixes for note in self._ledger.list_notes(prefix)
        )

    def _reconcile_event(self, event: ChurnEvent) -> AdjustmentResult:
        expected_note = expected_churn_note(event, self._config)
        try:
            if self._is_applied(event):
                return AdjustmentResult(
                    status=AdjustmentStatus.ALREADY_APPLIED, churn_event_id=event.id
                )
        except Exception as e:
            logger.exception("Could not check ledger for churn event %s", event.id)
            return AdjustmentResult(
                status=AdjustmentStatus.FAILED, churn_event_id=event.id, error=str(e)
            )

        return self.record_churn_adjustment(
            count=event.churn_count,
            note=expected_note,
            author=event.created_by or self._config.default_author,
            effective_date=event.effective_date,
            churn_event_id=event.id,
        )

    def _append_relative(
        self,
        delta: int,
        note: str,
        author: str,
        logged_date: date,
        churn_event_id: str | None = None,
    ) -> AdjustmentResult:
        current = self.current_value()
        if current is None:
            logger.info("AMC ledger has no baseline; skipping auto-adjustment '%s'", note)
            return AdjustmentResult(
                status=AdjustmentStatus.NO_BASELINE, churn_event_id=churn_event_id
            )

        entry = self._ledger.append(
            LedgerEntry(
                logged_date=logged_date,
                amc_value=current + delta,
                note=note,
                created_by=author,
                churn_event_id=churn_event_id,
            )
        )
        return AdjustmentResult(
            status=AdjustmentStatus.APPLIED, entry=entry, churn_event_id=churn_event_id
        )


# --- Factory ---


def create_ledger_reconciler(
    ledger_repo: LedgerRepoPort,
    clock: ClockPort,
    churn_repo: ChurnRepoPort | None = None,
    config: LedgerConfig | None = None,
) -> LedgerReconciler:
    """Create a LedgerReconciler."""
    return LedgerReconciler(
        ledger_repo=ledger_repo,
        clock=clock,
        churn_repo=churn_repo,
        config=config,
    )
