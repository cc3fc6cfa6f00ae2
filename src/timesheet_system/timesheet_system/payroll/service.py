from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from ..common.datetime_utils import (
    add_days,
    as_utc,
    civil_date_key,
    civil_date_of,
    end_of_civil_day,
    format_ny_date_display,
    format_ny_time_12h,
    iter_civil_dates,
    now_utc,
    start_of_civil_day,
)
from ..common.validators import require_iso_date
from ..core.constants import DEFAULT_MAX_EXPORT_DAYS, DEFAULT_REGULAR_HOURS_PER_DAY, DEFAULT_REPORT_DAYS
from ..core.enums import PunchType
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeRepository
from ..punches.model import PunchEvent, sort_punches
from ..punches.repository import PunchRepository
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator

_OPEN_TYPES = (PunchType.IN, PunchType.BREAK_START, PunchType.BREAK_END)


@dataclass(frozen=True)
class DaySpan:
    """Derived, never stored: one employee's punches on one New York civil date."""

    work_date: date
    punches: tuple[PunchEvent, ...]

    @property
    def key(self) -> str:
        return civil_date_key(self.work_date)


@dataclass(frozen=True)
class DayStats:
    in_times: tuple[str, ...]
    out_times: tuple[str, ...]
    break_hours: float
    total_hours: float
    overtime_hours: float


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    error_message: Optional[str] = None

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class TimesheetData:
    date_keys: list[str]
    employees: list[dict]
    rows: list[dict]
    summary: list[dict]


def group_by_civil_date(punches: Iterable[PunchEvent]) -> dict[str, list[PunchEvent]]:
    grouped: dict[str, list[PunchEvent]] = defaultdict(list)
    for punch in sort_punches(punches):
        grouped[civil_date_key(civil_date_of(punch.punched_at))].append(punch)
    return dict(grouped)


def _hours(value: float) -> str:
    return f"{value:.2f}"


class TimesheetService:
    """Use case: hours history per employee and the admin timesheet."""

    def __init__(
        self,
        punches: PunchRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[HoursCalculator] = None,
        regular_hours_per_day: float = DEFAULT_REGULAR_HOURS_PER_DAY,
        report_days: int = DEFAULT_REPORT_DAYS,
        max_export_days: int = DEFAULT_MAX_EXPORT_DAYS,
    ):
        self._punches = punches
        self._employees = employees
        self._calculator = calculator or StandardHoursCalculator()
        self._regular_hours = float(regular_hours_per_day)
        self._report_days = int(report_days)
        self._max_days = int(max_export_days)

    def default_range(self, today: date) -> DateRange:
        return DateRange(start=add_days(today, -(self._report_days - 1)), end=today)

    def resolve_range(self, start_key: Optional[str], end_key: Optional[str], *, today: date) -> DateRange:
        """Turn optional ``YYYY-MM-DD`` query values into a checked date range.

        A future end date or an inverted range falls back to the default range
        with a message for the caller to display.
        """

        if not start_key or not end_key:
            return self.default_range(today)

        start = require_iso_date(start_key, "startDate")
        end = require_iso_date(end_key, "endDate")

        if civil_date_key(end) > civil_date_key(today):
            fallback = self.default_range(today)
            return DateRange(
                fallback.start,
                fallback.end,
                "Please select a valid date range. End date cannot be in the future.",
            )
        if civil_date_key(start) > civil_date_key(end):
            fallback = self.default_range(today)
            return DateRange(
                fallback.start,
                fallback.end,
                "Please select a valid date range. Start date must be before end date.",
            )

        result = DateRange(start, end)
        if result.days > self._max_days:
            raise ValidationError(f"Date range too large. Limit is {self._max_days} days.")
        return result

    def day_spans(self, employee_id: int, start: date, end: date) -> list[DaySpan]:
        punches = self._punches.select_range(employee_id, start_of_civil_day(start), end_of_civil_day(end))
        grouped = group_by_civil_date(punches)
        return [
            DaySpan(work_date=d, punches=tuple(grouped[civil_date_key(d)]))
            for d in iter_civil_dates(start, end)
            if civil_date_key(d) in grouped
        ]

    def day_stats(
        self,
        punches: Iterable[PunchEvent],
        *,
        is_today: bool,
        now: datetime,
        close_past_day: bool = False,
    ) -> DayStats:
        """Per-day figures. An open session counts to ``now`` on today and, with
        ``close_past_day``, to 23:59:59 on an earlier day.
        """

        ordered = sort_punches(punches)
        in_times: list[str] = []
        out_times: list[str] = []
        break_start: Optional[datetime] = None
        break_minutes = 0.0

        for punch in ordered:
            if punch.punch_type == PunchType.IN:
                in_times.append(format_ny_time_12h(punch.punched_at))
            elif punch.punch_type == PunchType.OUT:
                out_times.append(format_ny_time_12h(punch.punched_at))
            elif punch.punch_type == PunchType.BREAK_START:
                break_start = punch.punched_at
            elif punch.punch_type == PunchType.BREAK_END and break_start is not None:
                break_minutes += (punch.punched_at - break_start).total_seconds() / 60
                break_start = None

        open_end: Optional[datetime] = None
        if is_today and ordered and ordered[-1].punch_type in _OPEN_TYPES:
            open_end = now
        elif close_past_day and not is_today and ordered:
            open_end = end_of_civil_day(civil_date_of(ordered[0].punched_at))
        total_hours = self._calculator.hours_worked(ordered, open_end)

        return DayStats(
            in_times=tuple(in_times),
            out_times=tuple(out_times),
            break_hours=break_minutes / 60,
            total_hours=total_hours,
            overtime_hours=max(total_hours - self._regular_hours, 0.0),
        )

    def hours_history(self, employee_id: int, date_range: DateRange, *, now: Optional[datetime] = None) -> list[dict]:
        now = as_utc(now or now_utc())
        today = civil_date_of(now)

        rows: list[dict] = []
        for span in self.day_spans(employee_id, date_range.start, date_range.end):
            stats = self.day_stats(span.punches, is_today=span.work_date == today, now=now, close_past_day=True)
            rows.append(
                {
                    "date": span.key,
                    "date_display": format_ny_date_display(span.work_date),
                    "punch_in": list(stats.in_times),
                    "punch_out": list(stats.out_times),
                    "break_hours": _hours(stats.break_hours),
                    "total_hours": _hours(stats.total_hours),
                    "overtime_hours": _hours(stats.overtime_hours),
                }
            )
        rows.sort(key=lambda r: r["date"], reverse=True)
        return rows

    def build_timesheet(self, date_range: DateRange, *, now: Optional[datetime] = None) -> TimesheetData:
        now = as_utc(now or now_utc())
        today = civil_date_of(now)
        employees = list(self._employees.list_all())
        dates = list(iter_civil_dates(date_range.start, date_range.end))

        spans_by_employee: dict[int, dict[str, DaySpan]] = {}
        for emp in employees:
            spans = self.day_spans(emp.employee_id, date_range.start, date_range.end)
            spans_by_employee[emp.employee_id] = {s.key: s for s in spans}

        totals: dict[int, float] = defaultdict(float)
        rows: list[dict] = []
        for d in dates:
            key = civil_date_key(d)
            cells: dict[int, Optional[dict]] = {}
            for emp in employees:
                span = spans_by_employee[emp.employee_id].get(key)
                if span is None:
                    cells[emp.employee_id] = None
                    continue
                stats = self.day_stats(span.punches, is_today=d == today, now=now)
                totals[emp.employee_id] += stats.total_hours
                cells[emp.employee_id] = {
                    "punch_in": list(stats.in_times),
                    "total_break": _hours(stats.break_hours),
                    "punch_out": list(stats.out_times),
                    "total_hours": _hours(stats.total_hours),
                    "overtime_hours": _hours(stats.overtime_hours),
                }
            rows.append(
                {
                    "date": key,
                    "date_display": format_ny_date_display(d),
                    "is_weekend": d.weekday() >= 5,
                    "cells": cells,
                }
            )

        summary = [
            {
                "employee_id": emp.employee_id,
                "name": emp.name,
                "total_hours": _hours(totals[emp.employee_id]),
            }
            for emp in employees
        ]
        summary.sort(key=lambda s: float(s["total_hours"]), reverse=True)

        return TimesheetData(
            date_keys=[civil_date_key(d) for d in dates],
            employees=[{"employee_id": e.employee_id, "name": e.name} for e in employees],
            rows=rows,
            summary=summary,
        )
