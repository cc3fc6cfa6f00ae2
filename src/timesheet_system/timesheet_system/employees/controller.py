from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_token_required, json_error
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError
from .model import Employee


def _employee_json(e: Employee) -> dict:
    return {
        "employee_id": e.employee_id,
        "name": e.name,
        "email": e.email,
        "username": e.username,
        "is_admin": e.is_admin,
        "active": e.active,
        "created_at": e.created_at.isoformat() if e.created_at else None,
    }


def _form() -> dict:
    return request.get_json(silent=True) or request.form.to_dict()


def _flag(value) -> bool:
    return str(value).lower() in {"1", "true", "on", "yes"}


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/employees", endpoint="admin_employees")
    @admin_token_required
    def admin_employees():
        employees = container.employee_service.list_active()
        return jsonify({"ok": True, "employees": [_employee_json(e) for e in employees]})

    @app.route("/admin/employees", methods=["POST"], endpoint="admin_create_employee")
    @admin_token_required
    def admin_create_employee():
        data = _form()
        try:
            employee_id = container.employee_service.create(
                name=data.get("name", ""),
                email=data.get("email", ""),
                username=data.get("username", ""),
                is_admin=_flag(data.get("is_admin", False)),
            )
        except ValidationError as e:
            return json_error(str(e), 400)
        return jsonify({"ok": True, "employee_id": employee_id}), 201

    @app.route("/admin/employees/<int:employee_id>", endpoint="admin_employee")
    @admin_token_required
    def admin_employee(employee_id: int):
        try:
            employee = container.employee_service.get(employee_id)
        except NotFoundError as e:
            return json_error(str(e), 404)
        return jsonify({"ok": True, "employee": _employee_json(employee)})

    @app.route("/admin/employees/<int:employee_id>", methods=["POST"], endpoint="admin_update_employee")
    @admin_token_required
    def admin_update_employee(employee_id: int):
        data = _form()
        try:
            employee = container.employee_service.update(
                employee_id,
                name=data.get("name"),
                email=data.get("email"),
                username=data.get("username"),
                is_admin=_flag(data["is_admin"]) if "is_admin" in data else None,
            )
        except NotFoundError as e:
            return json_error(str(e), 404)
        except ValidationError as e:
            return json_error(str(e), 400)
        return jsonify({"ok": True, "employee": _employee_json(employee)})

    @app.route("/admin/employees/<int:employee_id>/delete", methods=["POST"], endpoint="admin_delete_employee")
    @admin_token_required
    def admin_delete_employee(employee_id: int):
        try:
            container.employee_service.deactivate(employee_id)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except ValidationError as e:
            return json_error(str(e), 400)
        return jsonify({"ok": True})
