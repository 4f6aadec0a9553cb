"""
Startup configuration: rules validation, logging setup, and the adapter
that exposes Rules through the components' RulesPort.
"""

from __future__ import annotations

import logging
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from studio_pipeline.domain.lifecycle import LifecycleConfig
from studio_pipeline.rules.models import Rules

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class StudioRulesAdapter:
    """Adapter to map generic Rules to the ledger/outcomes RulesPort."""

    def __init__(self, rules: Rules):
        self._studio = rules.studio
        self._ledger = rules.ledger

    def get_auto_churn_prefix(self) -> str:
        return self._ledger.auto_churn_prefix

    def get_churn_id_prefix_length(self) -> int:
        return self._ledger.churn_id_prefix_length

    def get_default_author(self) -> str:
        return self._ledger.default_author

    def get_amc_target(self) -> int | None:
        return self._studio.amc_target


def lifecycle_config(rules: Rules) -> LifecycleConfig:
    return LifecycleConfig(week_window_days=rules.lifecycle.week_window_days)


def validate_rules(rules: Rules, base_dir: Path) -> list[str]:
    """
    Validate operational requirements before startup.

    Returns a list of problems; empty means the rules are usable.
    """
    problems = []

    try:
        ZoneInfo(rules.studio.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        problems.append(f"Unknown studio timezone: {rules.studio.timezone}")

    migrations = base_dir / rules.storage.migrations_dir
    if not migrations.is_dir():
        problems.append(f"Migrations directory not found: {migrations}")

    if logging.getLevelName(rules.logging.level.upper()) not in (
        logging.DEBUG,
        logging.INFO,
        logging.WARNING,
        logging.ERROR,
        logging.CRITICAL,
    ):
        problems.append(f"Unknown log level: {rules.logging.level}")

    return problems


def configure_logging(rules: Rules) -> None:
    level = logging.getLevelName(rules.logging.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
