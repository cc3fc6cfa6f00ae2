"""Remove one punch, identified by username and New York wall-clock time.

Usage:
    python scripts/delete_punch.py --username jdoe --date 2025-12-17 --time 23:59:59 --type out
    python scripts/delete_punch.py --punch-id 42
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timesheet_system.timesheet_system.common.datetime_utils import ny_local_to_instant
from src.timesheet_system.timesheet_system.common.validators import require_iso_date, require_punch_type
from src.timesheet_system.timesheet_system.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--punch-id", type=int)
    parser.add_argument("--username")
    parser.add_argument("--date", help="NY date, YYYY-MM-DD")
    parser.add_argument("--time", help="NY time, HH:MM:SS")
    parser.add_argument("--type", choices=["in", "out", "break_start", "break_end"])
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG))

    if args.punch_id is not None:
        deleted = container.punches_repo.delete(args.punch_id)
        print(f"Deleted punch {args.punch_id}: {deleted}")
        return

    if not (args.username and args.date and args.time and args.type):
        parser.error("--username, --date, --time and --type are required without --punch-id")

    employee = container.employees_repo.get_by_username(args.username)
    if not employee:
        sys.exit(f"User not found: {args.username}")

    day = require_iso_date(args.date, "date")
    hour, minute, second = (int(part) for part in args.time.split(":"))
    punched_at = ny_local_to_instant(day.year, day.month, day.day, hour, minute, second)

    deleted = container.punches_repo.delete_matching(employee.employee_id, require_punch_type(args.type), punched_at)
    print(f"Deleted rows: {deleted} for {args.username} {args.date} {args.time} {args.type}")


if __name__ == "__main__":
    main()
