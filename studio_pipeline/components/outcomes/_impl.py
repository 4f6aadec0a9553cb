"""
OutcomeUpdateService - the single path for changing an intro's outcome.

Steps:
1. Update the linked run (result, buy date, commission)
2. Sync the booking's canon and legacy status from the new result
3. Add one member to the AMC ledger when the result newly becomes an
   eligible sale, at most once per run (amc_incremented_at stamp)

Key behaviors:
- A ledger failure never fails the outcome update
- Sales sourced from VIP events do not move AMC
- Changing between two sale tiers does not count a second sale
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from studio_pipeline.components.ledger import AdjustmentStatus, LedgerReconciler
from studio_pipeline.domain.entities import Run
from studio_pipeline.domain.outcome_status import (
    format_booking_status_for_db,
    map_result_to_booking_status,
    normalize_intro_result,
)
from studio_pipeline.domain.sales import (
    compute_commission,
    is_amc_eligible_sale,
    is_membership_sale,
)
from studio_pipeline.domain.vip import is_vip_run
from studio_pipeline.ports.clock import ClockPort
from studio_pipeline.ports.repo import BookingRepoPort, RunRepoPort

from .models import OutcomeUpdateParams, OutcomeUpdateResult

logger = logging.getLogger(__name__)


class OutcomeUpdateService:
    def __init__(
        self,
        booking_repo: BookingRepoPort,
        run_repo: RunRepoPort,
        ledger: LedgerReconciler,
        clock: ClockPort,
    ) -> None:
        self._bookings = booking_repo
        self._runs = run_repo
        self._ledger = ledger
        self._clock = clock

    def apply(self, params: OutcomeUpdateParams) -> OutcomeUpdateResult:
        try:
            run = self._find_run(params)
            previous_result = params.previous_result
            if previous_result is None and run is not None:
                previous_result = run.result

            if run is not None:
                run = self._update_run(run, params)
            status = self._sync_booking(params)
            did_increment = self._maybe_increment_amc(params, run, previous_result)
        except Exception as e:
            logger.exception("Outcome update failed for booking %s", params.booking_id)
            return OutcomeUpdateResult(success=False, error=str(e))

        logger.info(
            "Outcome for %s: %s -> %s (AMC %s)",
            params.member_name,
            previous_result or "none",
            params.new_result,
            "+1" if did_increment else "unchanged",
        )
        return OutcomeUpdateResult(
            success=True,
            run_id=run.id if run else params.run_id,
            booking_status=status,
            did_increment_amc=did_increment,
        )

    def _find_run(self, params: OutcomeUpdateParams) -> Run | None:
        if params.run_id:
            return self._runs.get_by_id(params.run_id)
        if params.booking_id:
            return self._runs.get_latest_for_booking(params.booking_id)
        return None

    def _update_run(self, run: Run, params: OutcomeUpdateParams) -> Run:
        buy_date = run.buy_date
        if is_membership_sale(params.new_result) and not buy_date:
            buy_date = self._clock.today().isoformat()

        commission = params.commission_amount
        if commission is None:
            commission = compute_commission(params.new_result)

        return self._runs.save(
            run.model_copy(
                update={
                    "result": params.new_result,
                    "buy_date": buy_date,
                    "commission_amount": commission,
                }
            )
        )

    def _sync_booking(self, params: OutcomeUpdateParams) -> str | None:
        status = map_result_to_booking_status(normalize_intro_result(params.new_result))
        stored = format_booking_status_for_db(status)

        booking = self._bookings.get_by_id(params.booking_id)
        if booking is None:
            return None

        self._bookings.save(
            booking.model_copy(
                update={"booking_status": stored, "booking_status_canon": status.value}
            )
        )
        return stored

    def _maybe_increment_amc(
        self,
        params: OutcomeUpdateParams,
        run: Run | None,
        previous_result: str | None,
    ) -> bool:
        if not is_membership_sale(params.new_result):
            return False
        if is_membership_sale(previous_result):
            return False
        if run is not None and run.amc_incremented_at is not None:
            return False
        if run is not None and is_vip_run(run):
            return False

        lead_source = params.lead_source or (run.lead_source if run else None)
        if not is_amc_eligible_sale(params.new_result, lead_source):
            return False

        result = self._ledger.record_sale_adjustment(
            params.member_name, params.new_result, params.edited_by
        )
        if result.status != AdjustmentStatus.APPLIED:
            return False

        if run is not None:
            self._runs.save(run.model_copy(update={"amc_incremented_at": datetime.now(UTC)}))
        return True


# --- Factory ---


def create_outcome_update_service(
    booking_repo: BookingRepoPort,
    run_repo: RunRepoPort,
    ledger: LedgerReconciler,
    clock: ClockPort,
) -> OutcomeUpdateService:
    """Create an OutcomeUpdateService."""
    return OutcomeUpdateService(
        booking_repo=booking_repo,
        run_repo=run_repo,
        ledger=ledger,
        clock=clock,
    )
