from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import civil_date_of, now_utc
from ..common.web import admin_token_required, json_error
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/timesheet", endpoint="admin_timesheet")
    @admin_token_required
    def admin_timesheet():
        now = now_utc()
        try:
            date_range = container.timesheet_service.resolve_range(
                request.args.get("startDate"),
                request.args.get("endDate"),
                today=civil_date_of(now),
            )
        except ValidationError as e:
            return json_error(str(e), 400)

        data = container.timesheet_service.build_timesheet(date_range, now=now)
        return jsonify(
            {
                "ok": True,
                "startDate": date_range.start.isoformat(),
                "endDate": date_range.end.isoformat(),
                "errorMessage": date_range.error_message,
                "dates": data.date_keys,
                "employees": data.employees,
                "rows": data.rows,
                "summary": data.summary,
            }
        )
