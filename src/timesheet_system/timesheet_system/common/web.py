from __future__ import annotations

import hmac
from functools import wraps

from flask import current_app, jsonify, request


def json_error(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


def admin_token_required(view):
    """Guard admin endpoints with the configured DEV_TEST_TOKEN.

    The token may be sent as ``?token=`` or as an ``X-Admin-Token`` header.
    An empty configured token locks the endpoints entirely.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("DEV_TEST_TOKEN") or ""
        supplied = request.headers.get("X-Admin-Token") or request.args.get("token") or ""
        if not expected or not hmac.compare_digest(expected, supplied):
            return json_error("Forbidden", 403)
        return view(*args, **kwargs)

    return wrapper
