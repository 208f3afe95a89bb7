"""Periodic job: close lapsed banked-hours cycles for every employer with cycling enabled.

Meant to run daily (cron / systemd timer) next to the web app.
"""

from __future__ import annotations

import argparse
import importlib
from datetime import date

from dotenv import load_dotenv

from config import get_settings_module
from timebank.common.datetime_utils import parse_iso_date
from timebank.container import build_container
from timebank.core.exceptions import DomainError
from timebank.logging_config import configure_logging, get_logger

logger = get_logger("scripts.advance_cycles")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--today", type=parse_iso_date, default=None, help="override today's date (YYYY-MM-DD)")
    parser.add_argument("--recalculate", action="store_true", help="re-apply tolerance to all punches first")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    today: date = args.today or date.today()

    if args.recalculate:
        container.punch_service.recalculate_all(until=today)

    failures = 0
    for employer_id in container.configs_repo.list_cycle_enabled():
        try:
            result = container.cycle_manager.detect_and_advance(employer_id, today=today)
        except DomainError:
            logger.error("cycle_advance_failed", extra={"employer_id": employer_id}, exc_info=True)
            failures += 1
            continue
        print(f"employer {employer_id}: {type(result).__name__}")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
