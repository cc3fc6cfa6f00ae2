from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timesheet_system.timesheet_system.database.bootstrap import apply_schema, ensure_initial_admin, list_tables


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    created = ensure_initial_admin(
        db_config,
        name="Admin",
        email=getattr(settings, "ADMIN_EMAIL", "admin@example.com"),
        username=getattr(settings, "ADMIN_USERNAME", "admin"),
    )
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)}, admin_created={created})"
    )


if __name__ == "__main__":
    main()
