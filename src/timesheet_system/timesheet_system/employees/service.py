from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_email, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Use case: manage employee records (admin)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_active(self):
        return self._employees.list_active()

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def create(self, *, name: str, email: str, username: str, is_admin: bool = False) -> int:
        name = require_non_empty(name, "Name")
        email = require_email(email, "Email")
        username = require_non_empty(username, "Username")

        if self._employees.get_by_username(username):
            raise ValidationError("Username already exists")
        if self._employees.get_by_email(email):
            raise ValidationError("Email already exists")

        employee_id = self._employees.create(name=name, email=email, username=username, is_admin=bool(is_admin))
        logger.info("Employee %s created (username=%s)", employee_id, username)
        return employee_id

    def update(
        self,
        employee_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        username: Optional[str] = None,
        is_admin: Optional[bool] = None,
    ) -> Employee:
        current = self.get(employee_id)

        name = require_non_empty(name, "Name") if name is not None else current.name
        email = require_email(email, "Email") if email is not None else current.email
        username = require_non_empty(username, "Username") if username is not None else current.username
        is_admin = current.is_admin if is_admin is None else bool(is_admin)

        if username != current.username:
            other = self._employees.get_by_username(username)
            if other and other.employee_id != current.employee_id:
                raise ValidationError("Username already exists")
        if email != current.email:
            other = self._employees.get_by_email(email)
            if other and other.employee_id != current.employee_id:
                raise ValidationError("Email already exists")

        self._employees.update(employee_id, name=name, email=email, username=username, is_admin=is_admin)
        return self.get(employee_id)

    def deactivate(self, employee_id: int) -> None:
        """Soft delete: the employee leaves rollover/backfill, punches are kept."""

        if not self.get(employee_id).active:
            return
        if not self._employees.set_active(employee_id, active=False):
            raise ValidationError("Failed to deactivate employee")
        logger.info("Employee %s deactivated", employee_id)
