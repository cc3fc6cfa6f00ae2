from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import civil_date_of, format_ny_datetime, now_utc
from ..common.web import json_error
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError
from .model import PunchEvent


def _punch_json(p: PunchEvent) -> dict:
    return {
        "punch_id": p.punch_id,
        "type": p.punch_type.value,
        "punched_at": p.punched_at.isoformat(),
        "punched_at_ny": format_ny_datetime(p.punched_at),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employees/<int:employee_id>/punch/<punch_type>", methods=["POST"], endpoint="punch")
    def punch(employee_id: int, punch_type: str):
        try:
            event = container.punch_service.record_punch(employee_id, punch_type)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except ValidationError as e:
            return json_error(str(e), 400)
        return jsonify({"ok": True, "punch": _punch_json(event)}), 201

    @app.route("/api/employees/<int:employee_id>/dashboard", endpoint="dashboard")
    def dashboard(employee_id: int):
        try:
            snap = container.punch_service.dashboard(employee_id)
        except NotFoundError as e:
            return json_error(str(e), 404)
        return jsonify(
            {
                "ok": True,
                "state": snap.state.value,
                "is_punched_in": snap.is_punched_in,
                "is_on_break": snap.is_on_break,
                "today": snap.today_key,
                "today_hours": f"{snap.today_hours:.2f}",
                "today_minutes": f"{snap.today_hours * 60:.2f}",
                "punches": [_punch_json(p) for p in snap.recent],
            }
        )

    @app.route("/api/employees/<int:employee_id>/hours", endpoint="hours")
    def hours(employee_id: int):
        now = now_utc()
        try:
            container.employee_service.get(employee_id)
            container.punch_service.ensure_backfilled(employee_id, now=now)
            date_range = container.timesheet_service.resolve_range(
                request.args.get("startDate"),
                request.args.get("endDate"),
                today=civil_date_of(now),
            )
            rows = container.timesheet_service.hours_history(employee_id, date_range, now=now)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except ValidationError as e:
            return json_error(str(e), 400)
        return jsonify(
            {
                "ok": True,
                "startDate": date_range.start.isoformat(),
                "endDate": date_range.end.isoformat(),
                "errorMessage": date_range.error_message,
                "days": rows,
            }
        )
