from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, name, email, username, is_admin, active, created_at"


def _to_employee(row: dict) -> Employee:
    created_at = row.get("created_at")
    return Employee(
        employee_id=int(row["employee_id"]),
        name=row["name"],
        email=row["email"],
        username=row["username"],
        is_admin=bool(row.get("is_admin", False)),
        active=bool(row.get("active", True)),
        created_at=from_db_datetime(created_at) if created_at else None,
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_username(self, username: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def select_active_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM employees WHERE active=1 ORDER BY employee_id")
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE active=1 ORDER BY employee_id")
            return [_to_employee(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY name")
            return [_to_employee(r) for r in fetchall(cur)]

    def create(self, *, name: str, email: str, username: str, is_admin: bool = False) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(name, email, username, is_admin, active)
                VALUES(%s, %s, %s, %s, 1)
                """,
                (name, email, username, 1 if is_admin else 0),
            )
            return int(cur.lastrowid)

    def update(self, employee_id: int, *, name: str, email: str, username: str, is_admin: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET name=%s, email=%s, username=%s, is_admin=%s
                WHERE employee_id=%s
                """,
                (name, email, username, 1 if is_admin else 0, int(employee_id)),
            )
            return cur.rowcount > 0

    def set_active(self, employee_id: int, *, active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET active=%s WHERE employee_id=%s",
                (1 if active else 0, int(employee_id)),
            )
            return cur.rowcount > 0
