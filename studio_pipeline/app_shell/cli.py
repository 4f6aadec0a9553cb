import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from studio_pipeline.adapters.clock import SystemClock
from studio_pipeline.adapters.migrator import SQLiteMigrator
from studio_pipeline.adapters.sqlite_db import (
    SQLiteBookingRepo,
    SQLiteChurnRepo,
    SQLiteLedgerRepo,
    SQLiteRunRepo,
)
from studio_pipeline.app_shell.config import (
    StudioRulesAdapter,
    configure_logging,
    lifecycle_config,
    validate_rules,
)
from studio_pipeline.components import ledger
from studio_pipeline.domain.lifecycle import LifecycleConfig
from studio_pipeline.domain.outcomes import needs_outcome_worklist
from studio_pipeline.rules.loader import load_rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


@dataclass
class CliContext:
    clock: SystemClock
    bookings: SQLiteBookingRepo
    runs: SQLiteRunRepo
    ledger_repo: SQLiteLedgerRepo
    churn_repo: SQLiteChurnRepo
    rules: StudioRulesAdapter
    lifecycle: LifecycleConfig
    db_path: str
    migrations_dir: str


def get_context(rules_path: Path) -> CliContext:
    try:
        rules = load_rules(rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)

    configure_logging(rules)
    base_dir = rules_path.resolve().parent
    problems = validate_rules(rules, base_dir)
    if problems:
        for problem in problems:
            logger.error("Configuration: %s", problem)
        sys.exit(1)

    db_path = str(base_dir / rules.storage.db_path)
    return CliContext(
        clock=SystemClock(rules.studio.timezone),
        bookings=SQLiteBookingRepo(db_path),
        runs=SQLiteRunRepo(db_path),
        ledger_repo=SQLiteLedgerRepo(db_path),
        churn_repo=SQLiteChurnRepo(db_path),
        rules=StudioRulesAdapter(rules),
        lifecycle=lifecycle_config(rules),
        db_path=db_path,
        migrations_dir=str(base_dir / rules.storage.migrations_dir),
    )


def _report(out: ledger.LedgerAdjustmentOutput) -> None:
    if not out.success:
        for err in out.errors:
            logger.error("%s", err.message)
        sys.exit(1)
    if out.entry is not None:
        print(f"AMC is now {out.entry.amc_value} ({out.entry.note})")
    else:
        print(f"No ledger change: {out.status}")


def handle_migrate(ctx: CliContext, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(ctx.db_path, ctx.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migrations.")


def handle_amc(ctx: CliContext, args: argparse.Namespace) -> None:
    out = ledger.run_current_value(
        ledger.GetCurrentValueInput(), ledger_repo=ctx.ledger_repo, clock=ctx.clock, rules=ctx.rules
    )
    if out.value is None:
        print("AMC ledger has no baseline yet. Seed it with: seed VALUE")
        return
    line = f"AMC: {out.value}"
    if out.target is not None:
        line += f" / {out.target} ({out.remaining} to go)"
    print(line)


def handle_seed(ctx: CliContext, args: argparse.Namespace) -> None:
    _report(
        ledger.run_seed_baseline(
            ledger.SeedBaselineInput(value=args.value, author=args.author, note=args.note),
            ledger_repo=ctx.ledger_repo,
            clock=ctx.clock,
            rules=ctx.rules,
        )
    )


def handle_adjust(ctx: CliContext, args: argparse.Namespace) -> None:
    _report(
        ledger.run_manual_adjustment(
            ledger.ManualAdjustmentInput(delta=args.delta, author=args.author, note=args.note),
            ledger_repo=ctx.ledger_repo,
            clock=ctx.clock,
            rules=ctx.rules,
        )
    )


def handle_log_sale(ctx: CliContext, args: argparse.Namespace) -> None:
    _report(
        ledger.run_record_sale(
            ledger.RecordSaleInput(
                person_name=args.name, membership_type=args.membership, author=args.author
            ),
            ledger_repo=ctx.ledger_repo,
            clock=ctx.clock,
            rules=ctx.rules,
        )
    )


def handle_log_churn(ctx: CliContext, args: argparse.Namespace) -> None:
    effective = args.effective_date or ctx.clock.today()
    out = ledger.run_log_churn(
        ledger.LogChurnInput(
            count=args.count, effective_date=effective, author=args.author, note=args.note
        ),
        ledger_repo=ctx.ledger_repo,
        churn_repo=ctx.churn_repo,
        clock=ctx.clock,
        rules=ctx.rules,
    )
    if not out.success:
        for err in out.errors:
            logger.error("%s", err.message)
        sys.exit(1)

    print(f"Churn event logged: {args.count} members effective {effective.isoformat()}")
    if out.adjustment is None:
        print("Not yet effective; it will be applied once the date arrives.")
    else:
        _report(out.adjustment)


def handle_reconcile(ctx: CliContext, args: argparse.Namespace) -> None:
    out = ledger.run_reconcile(
        ledger.ReconcileChurnInput(),
        ledger_repo=ctx.ledger_repo,
        churn_repo=ctx.churn_repo,
        clock=ctx.clock,
        rules=ctx.rules,
    )
    print(
        f"{out.total_events} effective churn events: {out.applied} applied, "
        f"{out.already_applied} already applied, {out.no_baseline} waiting for baseline, "
        f"{out.failed} failed"
    )
    if not out.success:
        for err in out.errors:
            logger.error("%s", err.message)
        sys.exit(1)


def handle_needs_outcome(ctx: CliContext, args: argparse.Namespace) -> None:
    today = ctx.clock.today()
    bookings = ctx.bookings.list_by_date_range(None, today)
    pending = needs_outcome_worklist(bookings, ctx.runs.list_all(), today, ctx.lifecycle)
    if not pending:
        print("No intros waiting for an outcome.")
        return
    for booking in pending:
        print(f"{booking.class_date}  {booking.member_name}  [{booking.id}]")


HANDLERS = {
    "migrate": handle_migrate,
    "amc": handle_amc,
    "seed": handle_seed,
    "adjust": handle_adjust,
    "log-sale": handle_log_sale,
    "log-churn": handle_log_churn,
    "reconcile-churn": handle_reconcile,
    "needs-outcome": handle_needs_outcome,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Studio sales pipeline CLI")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    parser.add_argument("--author", default="cli", help="Name recorded on ledger entries")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending schema migrations")
    subparsers.add_parser("amc", help="Show the current AMC and distance to target")

    seed_parser = subparsers.add_parser("seed", help="Record an absolute AMC value")
    seed_parser.add_argument("value", type=int)
    seed_parser.add_argument("--note")

    adjust_parser = subparsers.add_parser("adjust", help="Adjust AMC by a signed delta")
    adjust_parser.add_argument("delta", type=int)
    adjust_parser.add_argument("--note")

    sale_parser = subparsers.add_parser("log-sale", help="Add one member for a sale")
    sale_parser.add_argument("name")
    sale_parser.add_argument("membership")

    churn_parser = subparsers.add_parser("log-churn", help="Log members lost")
    churn_parser.add_argument("count", type=int)
    churn_parser.add_argument(
        "--effective-date", type=date.fromisoformat, help="YYYY-MM-DD (default: today)"
    )
    churn_parser.add_argument("--note")

    subparsers.add_parser("reconcile-churn", help="Apply effective churn events")
    subparsers.add_parser("needs-outcome", help="List past intros missing an outcome")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    ctx = get_context(Path(args.rules))
    HANDLERS[args.command](ctx, args)


if __name__ == "__main__":
    main()
