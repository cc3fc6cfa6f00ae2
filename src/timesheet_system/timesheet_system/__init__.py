"""Timesheet System package.

This package is organized by feature modules (punches, employees, payroll,
rollover) with a thin Flask controller layer over service/repository layers.
All civil dates are New York dates; see ``common.datetime_utils``.
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_initial_admin, list_tables
from .employees.controller import register as register_employees
from .payroll.controller import register as register_payroll
from .punches.controller import register as register_punches
from .rollover.controller import register as register_rollover

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEV_TEST_TOKEN"] = getattr(settings, "DEV_TEST_TOKEN", "")

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            ensure_initial_admin(
                db_config,
                name="Admin",
                email=getattr(settings, "ADMIN_EMAIL", "admin@example.com"),
                username=getattr(settings, "ADMIN_USERNAME", "admin"),
            )
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            backfill_days=int(getattr(settings, "BACKFILL_DAYS", 7)),
            regular_hours_per_day=float(getattr(settings, "REGULAR_HOURS_PER_DAY", 8)),
            max_export_days=int(getattr(settings, "MAX_EXPORT_DAYS", 730)),
        )

    app.extensions["timesheet_container"] = container

    register_punches(app, container)
    register_employees(app, container)
    register_payroll(app, container)
    register_rollover(app, container)

    if bool(getattr(settings, "ENABLE_MIDNIGHT_SCHEDULER", False)):
        container.scheduler.start()

    return app
