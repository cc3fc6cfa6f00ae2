from __future__ import annotations

import logging

import mysql.connector
from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc
from ..common.web import admin_token_required, json_error
from ..container import Container
from ..core.constants import TIMEZONE_NAME

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/rollover-now", methods=["POST"], endpoint="rollover_now")
    @admin_token_required
    def rollover_now():
        try:
            result = container.rollover_engine.run_rollover_for_now()
        except mysql.connector.Error as e:
            logger.exception("Manual rollover failed")
            return json_error(str(e), 500)
        return jsonify({"ok": True, **result.as_dict()})

    @app.route("/admin/backfill/<int:employee_id>", methods=["POST"], endpoint="backfill_now")
    @admin_token_required
    def backfill_now(employee_id: int):
        days = request.args.get("days", default=container.backfill_days, type=int)
        if days is None or days < 1:
            return json_error("days must be a positive integer", 400)
        try:
            inserted = container.rollover_engine.ensure_backfill_for_user(employee_id, days)
        except mysql.connector.Error as e:
            logger.exception("Backfill failed for employee %s", employee_id)
            return json_error(str(e), 500)
        return jsonify({"ok": True, "employee_id": employee_id, "days": days, "inserted": inserted})

    @app.route("/health", endpoint="health")
    def health():
        db_connected = container.conn.ping() if container.conn is not None else False
        scheduler = container.scheduler
        return jsonify(
            {
                "status": "ok",
                "dbConnected": db_connected,
                "serverTimeUTC": now_utc().isoformat(),
                "timezone": TIMEZONE_NAME,
                "schedulerRunning": bool(scheduler and scheduler.running),
            }
        )
