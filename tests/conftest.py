from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

import pytest

os.environ.setdefault("APP_ENV", "testing")

from src.timesheet_system.timesheet_system.common.datetime_utils import as_utc, now_utc, ny_local_to_instant
from src.timesheet_system.timesheet_system.core.enums import PunchType
from src.timesheet_system.timesheet_system.employees.model import Employee
from src.timesheet_system.timesheet_system.punches.model import PunchEvent
from src.timesheet_system.timesheet_system.rollover.engine import RolloverEngine


class InMemoryPunches:
    """Punch log fake honouring the unique (employee, type, instant) key."""

    def __init__(self):
        self._rows: list[PunchEvent] = []
        self._id = 0

    def add(self, employee_id: int, punch_type, punched_at: datetime) -> PunchEvent:
        self._id += 1
        event = PunchEvent(
            employee_id=employee_id,
            punch_type=PunchType(punch_type),
            punched_at=as_utc(punched_at).replace(microsecond=0),
            punch_id=self._id,
        )
        self._rows.append(event)
        return event

    def _exists(self, employee_id: int, punch_type: PunchType, punched_at: datetime) -> bool:
        at = as_utc(punched_at).replace(microsecond=0)
        return any(
            p.employee_id == employee_id and p.punch_type == punch_type and p.punched_at == at for p in self._rows
        )

    def _for(self, employee_id: int) -> list[PunchEvent]:
        rows = [p for p in self._rows if p.employee_id == employee_id]
        rows.sort(key=lambda p: (p.punched_at, p.punch_id))
        return rows

    def insert(self, employee_id: int, punch_type: PunchType, punched_at: Optional[datetime] = None) -> PunchEvent:
        return self.add(employee_id, punch_type, punched_at or now_utc())

    def insert_if_absent(self, employee_id: int, punch_type: PunchType, punched_at: datetime) -> bool:
        if self._exists(employee_id, punch_type, punched_at):
            return False
        self.add(employee_id, punch_type, punched_at)
        return True

    def select_range(self, employee_id: int, start: datetime, end: datetime):
        return [p for p in self._for(employee_id) if as_utc(start) <= p.punched_at <= as_utc(end)]

    def select_up_to(self, employee_id: int, instant: datetime):
        return [p for p in self._for(employee_id) if p.punched_at <= as_utc(instant)]

    def select_most_recent(self, employee_id: int) -> Optional[PunchEvent]:
        rows = self._for(employee_id)
        return rows[-1] if rows else None

    def select_recent(self, employee_id: int, limit: int):
        return list(reversed(self._for(employee_id)))[:limit]

    def select_all(self, employee_id: int):
        return self._for(employee_id)

    def delete(self, punch_id: int) -> bool:
        before = len(self._rows)
        self._rows = [p for p in self._rows if p.punch_id != punch_id]
        return len(self._rows) < before

    def delete_matching(self, employee_id: int, punch_type: PunchType, punched_at: datetime) -> int:
        before = len(self._rows)
        at = as_utc(punched_at)
        self._rows = [
            p
            for p in self._rows
            if not (p.employee_id == employee_id and p.punch_type == punch_type and p.punched_at == at)
        ]
        return before - len(self._rows)

    def inserted_after(self, punch_id: int) -> list[PunchEvent]:
        """Rows added after ``punch_id``, in insertion order."""

        return [p for p in self._rows if p.punch_id > punch_id]

    @property
    def last_id(self) -> int:
        return self._id


class InMemoryEmployees:
    def __init__(self):
        self._by_id: dict[int, Employee] = {}
        self._id = 0

    def add(self, name: str = "A", *, active: bool = True, is_admin: bool = False) -> Employee:
        self._id += 1
        username = f"{name.lower()}{self._id}"
        employee = Employee(
            employee_id=self._id,
            name=name,
            email=f"{username}@example.com",
            username=username,
            is_admin=is_admin,
            active=active,
        )
        self._by_id[self._id] = employee
        return employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def get_by_username(self, username: str) -> Optional[Employee]:
        return next((e for e in self._by_id.values() if e.username == username), None)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return next((e for e in self._by_id.values() if e.email.lower() == email.lower()), None)

    def select_active_ids(self):
        return sorted(e.employee_id for e in self._by_id.values() if e.active)

    def list_active(self):
        return [self._by_id[i] for i in self.select_active_ids()]

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda e: e.name)

    def create(self, *, name: str, email: str, username: str, is_admin: bool = False) -> int:
        self._id += 1
        self._by_id[self._id] = Employee(
            employee_id=self._id, name=name, email=email, username=username, is_admin=is_admin, active=True
        )
        return self._id

    def update(self, employee_id: int, *, name: str, email: str, username: str, is_admin: bool) -> bool:
        current = self._by_id.get(employee_id)
        if not current:
            return False
        self._by_id[employee_id] = Employee(
            employee_id=employee_id,
            name=name,
            email=email,
            username=username,
            is_admin=is_admin,
            active=current.active,
        )
        return True

    def set_active(self, employee_id: int, *, active: bool) -> bool:
        current = self._by_id.get(employee_id)
        if not current:
            return False
        self._by_id[employee_id] = Employee(
            employee_id=current.employee_id,
            name=current.name,
            email=current.email,
            username=current.username,
            is_admin=current.is_admin,
            active=active,
        )
        return True


@pytest.fixture
def punches() -> InMemoryPunches:
    return InMemoryPunches()


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees()


@pytest.fixture
def engine(punches, employees) -> RolloverEngine:
    return RolloverEngine(punches, employees)


@pytest.fixture
def fixed_now() -> datetime:
    # 2025-12-18 09:00 in New York (EST).
    return ny_local_to_instant(2025, 12, 18, 9, 0, 0)
