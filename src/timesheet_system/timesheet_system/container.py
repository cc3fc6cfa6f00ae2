from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import DEFAULT_BACKFILL_DAYS, DEFAULT_MAX_EXPORT_DAYS, DEFAULT_REGULAR_HOURS_PER_DAY
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .payroll.calculator.standard_calculator import StandardHoursCalculator
from .payroll.service import TimesheetService
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.repository import PunchRepository
from .punches.service import PunchService
from .rollover.engine import RolloverEngine
from .rollover.scheduler import MidnightScheduler


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    punches_repo: PunchRepository
    employees_repo: EmployeeRepository

    rollover_engine: RolloverEngine
    scheduler: MidnightScheduler
    punch_service: PunchService
    employee_service: EmployeeService
    timesheet_service: TimesheetService

    backfill_days: int = DEFAULT_BACKFILL_DAYS


def wire_container(
    *,
    punches_repo: PunchRepository,
    employees_repo: EmployeeRepository,
    conn: Optional[DatabaseConnection] = None,
    backfill_days: int = DEFAULT_BACKFILL_DAYS,
    regular_hours_per_day: float = DEFAULT_REGULAR_HOURS_PER_DAY,
    max_export_days: int = DEFAULT_MAX_EXPORT_DAYS,
) -> Container:
    calculator = StandardHoursCalculator()
    rollover_engine = RolloverEngine(punches_repo, employees_repo)

    return Container(
        conn=conn,
        punches_repo=punches_repo,
        employees_repo=employees_repo,
        rollover_engine=rollover_engine,
        scheduler=MidnightScheduler(rollover_engine),
        punch_service=PunchService(
            punches_repo,
            employees_repo,
            rollover_engine,
            calculator=calculator,
            backfill_days=backfill_days,
        ),
        employee_service=EmployeeService(employees_repo),
        timesheet_service=TimesheetService(
            punches_repo,
            employees_repo,
            calculator=calculator,
            regular_hours_per_day=regular_hours_per_day,
            max_export_days=max_export_days,
        ),
        backfill_days=int(backfill_days),
    )


def build_container(
    *,
    db_config: dict,
    backfill_days: int = DEFAULT_BACKFILL_DAYS,
    regular_hours_per_day: float = DEFAULT_REGULAR_HOURS_PER_DAY,
    max_export_days: int = DEFAULT_MAX_EXPORT_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire_container(
        punches_repo=MySQLPunchRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        conn=conn,
        backfill_days=backfill_days,
        regular_hours_per_day=regular_hours_per_day,
        max_export_days=max_export_days,
    )
