"""Midnight rollover and backfill.

A session that is still open when New York civil midnight passes is cut in
two: the prior day gets an ``out`` one second before the boundary and the
new day an ``in`` at the boundary. When the employee was on break the cut is
wrapped as ``break_end(T-2s) < out(T-1s) < in(T) < break_start(T+1s)``,
where ``T`` is the boundary, so the break never straddles two days and
``break_end`` can never collapse onto ``out``.

Re-running a boundary is a no-op. Three layers keep it that way: a look
around the boundary for synthetic punches already present, a per-employee
lock serialising work inside this process, and the store's unique
``(employee_id, punch_type, punched_at)`` key for everything else.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import (
    add_days,
    as_utc,
    civil_date_key,
    civil_date_of,
    format_ny_datetime,
    now_utc,
    start_of_civil_day,
)
from ..core.constants import DEFAULT_BACKFILL_DAYS, ROLLOVER_WINDOW_PAD_SECONDS
from ..core.enums import PunchState, PunchType
from ..employees.repository import EmployeeRepository
from ..punches.repository import PunchRepository
from ..punches.state import state_at

logger = logging.getLogger(__name__)

ONE_SECOND = timedelta(seconds=1)


@dataclass(frozen=True)
class EmployeeRollover:
    """Outcome of one boundary for one employee."""

    employee_id: int
    boundary: datetime
    state_at_boundary: PunchState
    inserted: tuple[PunchType, ...] = ()

    @property
    def inserted_count(self) -> int:
        return len(self.inserted)


@dataclass(frozen=True)
class RolloverResult:
    boundary: datetime
    employees: tuple[EmployeeRollover, ...] = field(default_factory=tuple)

    @property
    def affected(self) -> int:
        return sum(e.inserted_count for e in self.employees)

    def as_dict(self) -> dict:
        return {
            "boundary": self.boundary.isoformat(),
            "civil_date": civil_date_key(civil_date_of(self.boundary)),
            "affected": self.affected,
            "employees": [
                {
                    "employee_id": e.employee_id,
                    "state": e.state_at_boundary.value,
                    "inserted": [t.value for t in e.inserted],
                }
                for e in self.employees
                if e.state_at_boundary is not PunchState.OUT
            ],
        }


def boundary_for(civil_date) -> datetime:
    """Boundary instant opening the given New York civil date."""

    return start_of_civil_day(civil_date)


class RolloverEngine:
    def __init__(
        self,
        punches: PunchRepository,
        employees: EmployeeRepository,
        *,
        window_pad_seconds: int = ROLLOVER_WINDOW_PAD_SECONDS,
    ):
        self._punches = punches
        self._employees = employees
        self._pad = timedelta(seconds=int(window_pad_seconds))
        self._locks: dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, employee_id: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(employee_id)
            if lock is None:
                lock = self._locks[employee_id] = threading.Lock()
            return lock

    def run_rollover_for_boundary(self, boundary: datetime) -> RolloverResult:
        """Cut every active employee's open session at ``boundary``.

        Store errors propagate: the pass stops at the failing employee and the
        caller (scheduler tick or admin request) sees the failure.
        """

        boundary = as_utc(boundary)
        outcomes = tuple(
            self.roll_employee(employee_id, boundary) for employee_id in self._employees.select_active_ids()
        )
        result = RolloverResult(boundary=boundary, employees=outcomes)
        logger.info(
            "Rollover for %s: %d employees checked, %d punches inserted",
            civil_date_key(civil_date_of(boundary)),
            len(outcomes),
            result.affected,
        )
        return result

    def run_rollover_for_now(self, now: Optional[datetime] = None) -> RolloverResult:
        """Roll over at the midnight that opened the current civil day."""

        now = as_utc(now or now_utc())
        boundary = boundary_for(civil_date_of(now))
        if boundary > now:
            # First hour of a fall-back day: the noon offset puts the boundary ahead of the clock.
            logger.warning("Rollover boundary %s is still ahead, skipping", boundary.isoformat())
            return RolloverResult(boundary=boundary)
        return self.run_rollover_for_boundary(boundary)

    def ensure_backfill_for_user(
        self,
        employee_id: int,
        days: int = DEFAULT_BACKFILL_DAYS,
        *,
        now: Optional[datetime] = None,
    ) -> int:
        """Apply missed rollovers for the last ``days`` boundaries, oldest first.

        The newest boundary is the midnight that opened today. Returns the
        number of punches inserted; inactive or unknown employees get none.
        """

        employee = self._employees.get_by_id(employee_id)
        if not employee or not employee.active:
            return 0

        now = as_utc(now or now_utc())
        today = civil_date_of(now)
        inserted = 0
        for back in range(int(days) - 1, -1, -1):
            boundary = boundary_for(add_days(today, -back))
            if boundary > now:
                continue
            outcome = self.roll_employee(employee_id, boundary)
            inserted += outcome.inserted_count

        if inserted:
            logger.info("Backfill for employee %s inserted %d punches over %d days", employee_id, inserted, days)
        return inserted

    def roll_employee(self, employee_id: int, boundary: datetime) -> EmployeeRollover:
        boundary = as_utc(boundary)
        end_of_prior_day = boundary - ONE_SECOND

        with self._lock_for(employee_id):
            history = self._punches.select_up_to(employee_id, end_of_prior_day)
            synthetic = {(PunchType.BREAK_END, end_of_prior_day - ONE_SECOND), (PunchType.OUT, end_of_prior_day)}
            if any((p.punch_type, p.punched_at) in synthetic for p in history):
                # An earlier cut already wrote part of the close; resolve from before it.
                state = state_at(history, end_of_prior_day - 2 * ONE_SECOND)
            else:
                state = state_at(history, end_of_prior_day)
            if state is PunchState.OUT:
                return EmployeeRollover(employee_id, boundary, state)

            window = self._punches.select_range(employee_id, end_of_prior_day - self._pad, boundary + self._pad)
            has_out = any(p.punch_type == PunchType.OUT for p in window)
            has_in = any(p.punch_type == PunchType.IN for p in window)
            has_break_end = any(p.punch_type == PunchType.BREAK_END and p.punched_at < boundary for p in window)
            has_break_start = any(p.punch_type == PunchType.BREAK_START and p.punched_at >= boundary for p in window)

            planned: list[tuple[PunchType, datetime]] = []
            if state is PunchState.BREAK and not has_break_end:
                planned.append((PunchType.BREAK_END, end_of_prior_day - ONE_SECOND))
            if not has_out:
                planned.append((PunchType.OUT, end_of_prior_day))
            if not has_in:
                planned.append((PunchType.IN, boundary))
            if state is PunchState.BREAK and not has_break_start:
                planned.append((PunchType.BREAK_START, boundary + ONE_SECOND))

            inserted: list[PunchType] = []
            for punch_type, at in planned:
                if self._punches.insert_if_absent(employee_id, punch_type, at):
                    inserted.append(punch_type)
                    logger.info(
                        "Rollover: employee %s %s at %s (NY)",
                        employee_id,
                        punch_type.value,
                        format_ny_datetime(at),
                    )

        return EmployeeRollover(employee_id, boundary, state, tuple(inserted))
