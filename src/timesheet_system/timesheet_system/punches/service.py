from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import as_utc, civil_date_key, civil_date_of, end_of_civil_day, now_utc, start_of_civil_day
from ..common.validators import require_punch_type
from ..core.constants import DEFAULT_BACKFILL_DAYS, DEFAULT_RECENT_PUNCHES
from ..core.enums import PunchState, PunchType
from ..core.exceptions import NotFoundError, PunchRejectedError
from ..employees.repository import EmployeeRepository
from ..payroll.calculator.base import HoursCalculator
from ..payroll.calculator.standard_calculator import StandardHoursCalculator
from ..rollover.engine import RolloverEngine
from .model import PunchEvent
from .repository import PunchRepository
from .state import state_at

logger = logging.getLogger(__name__)

_OPEN_TYPES = (PunchType.IN, PunchType.BREAK_START, PunchType.BREAK_END)


@dataclass(frozen=True)
class DashboardSnapshot:
    employee_id: int
    state: PunchState
    today_key: str
    today_hours: float
    recent: tuple[PunchEvent, ...]
    today_punches: tuple[PunchEvent, ...]

    @property
    def is_punched_in(self) -> bool:
        return self.state is not PunchState.OUT

    @property
    def is_on_break(self) -> bool:
        return self.state is PunchState.BREAK


def check_transition(last: Optional[PunchEvent], punch_type: PunchType) -> None:
    """Raise PunchRejectedError when ``punch_type`` cannot follow ``last``."""

    last_type = last.punch_type if last else None

    if punch_type == PunchType.BREAK_START:
        if last_type == PunchType.BREAK_START:
            raise PunchRejectedError("You are already on a break. End your break first.")
        if last_type not in (PunchType.IN, PunchType.BREAK_END):
            raise PunchRejectedError("Please punch in first before taking a break")

    elif punch_type == PunchType.BREAK_END:
        if last_type != PunchType.BREAK_START:
            raise PunchRejectedError("You are not currently on a break.")

    elif punch_type == PunchType.IN:
        if last_type in _OPEN_TYPES:
            raise PunchRejectedError("You are already punched in. Please punch out first.")

    elif punch_type == PunchType.OUT:
        if last_type is None:
            raise PunchRejectedError("Please punch in first.")
        if last_type == PunchType.OUT:
            raise PunchRejectedError("You are already punched out. Please punch in first.")
        if last_type == PunchType.BREAK_START:
            raise PunchRejectedError("Please end your break before punching out.")


class PunchService:
    def __init__(
        self,
        punches: PunchRepository,
        employees: EmployeeRepository,
        rollover: RolloverEngine,
        *,
        calculator: Optional[HoursCalculator] = None,
        backfill_days: int = DEFAULT_BACKFILL_DAYS,
        recent_limit: int = DEFAULT_RECENT_PUNCHES,
    ):
        self._punches = punches
        self._employees = employees
        self._rollover = rollover
        self._calculator = calculator or StandardHoursCalculator()
        self._backfill_days = int(backfill_days)
        self._recent_limit = int(recent_limit)
        self._backfilled: set[int] = set()
        self._backfilled_guard = threading.Lock()

    def _require_active(self, employee_id: int):
        employee = self._employees.get_by_id(employee_id)
        if not employee or not employee.active:
            raise NotFoundError("Employee not found")
        return employee

    def ensure_backfilled(self, employee_id: int, *, now: Optional[datetime] = None) -> int:
        """Run the missed-rollover backfill once per employee per process.

        Compensates for scheduler downtime; later calls are no-ops.
        """

        with self._backfilled_guard:
            if employee_id in self._backfilled:
                return 0
        inserted = self._rollover.ensure_backfill_for_user(employee_id, self._backfill_days, now=now)
        with self._backfilled_guard:
            self._backfilled.add(employee_id)
        return inserted

    def record_punch(self, employee_id: int, punch_type: str | PunchType, *, now: Optional[datetime] = None) -> PunchEvent:
        punch_type = require_punch_type(punch_type.value if isinstance(punch_type, PunchType) else punch_type)
        self._require_active(employee_id)
        self.ensure_backfilled(employee_id, now=now)

        check_transition(self._punches.select_most_recent(employee_id), punch_type)

        punch = self._punches.insert(employee_id, punch_type, as_utc(now) if now else None)
        logger.info("Employee %s punched %s", employee_id, punch_type.value)
        return punch

    def today_hours(self, employee_id: int, *, now: Optional[datetime] = None) -> float:
        return self.dashboard(employee_id, now=now).today_hours

    def dashboard(self, employee_id: int, *, now: Optional[datetime] = None) -> DashboardSnapshot:
        now = as_utc(now or now_utc())
        self._require_active(employee_id)
        self.ensure_backfilled(employee_id, now=now)

        recent = tuple(self._punches.select_recent(employee_id, self._recent_limit))
        state = state_at(recent, now)

        today = civil_date_of(now)
        today_punches = tuple(
            self._punches.select_range(employee_id, start_of_civil_day(today), end_of_civil_day(today))
        )
        still_in = bool(today_punches) and today_punches[-1].punch_type in _OPEN_TYPES
        today_hours = self._calculator.hours_worked(today_punches, now if still_in else None)

        return DashboardSnapshot(
            employee_id=employee_id,
            state=state,
            today_key=civil_date_key(today),
            today_hours=today_hours,
            recent=recent,
            today_punches=today_punches,
        )
