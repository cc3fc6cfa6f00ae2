"""Run the midnight rollover (or a single employee's backfill) by hand.

Usage:
    python scripts/rollover_now.py
    python scripts/rollover_now.py --backfill jdoe --days 7
"""
from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timesheet_system.timesheet_system.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--backfill", metavar="USERNAME")
    parser.add_argument("--days", type=int, default=7)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG))

    if args.backfill:
        employee = container.employees_repo.get_by_username(args.backfill)
        if not employee:
            sys.exit(f"User not found: {args.backfill}")
        inserted = container.rollover_engine.ensure_backfill_for_user(employee.employee_id, args.days)
        print(f"Backfill inserted {inserted} punches for {args.backfill}")
        return

    result = container.rollover_engine.run_rollover_for_now()
    print(json.dumps(result.as_dict(), indent=2))


if __name__ == "__main__":
    main()
