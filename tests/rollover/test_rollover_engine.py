from datetime import date, datetime, timedelta, timezone

import pytest

from src.timesheet_system.timesheet_system.common.datetime_utils import ny_local_to_instant
from src.timesheet_system.timesheet_system.core.enums import PunchState, PunchType
from src.timesheet_system.timesheet_system.rollover.engine import RolloverEngine, boundary_for
from conftest import InMemoryPunches

BOUNDARY = ny_local_to_instant(2025, 12, 18)


def types_and_times(rows):
    return [(p.punch_type, p.punched_at) for p in rows]


def test_on_break_at_midnight_wraps_break(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(emp.employee_id, "break_start", ny_local_to_instant(2025, 12, 17, 22, 0, 0))
    mark = punches.last_id

    result = engine.run_rollover_for_boundary(BOUNDARY)

    assert result.affected == 4
    assert types_and_times(punches.inserted_after(mark)) == [
        (PunchType.BREAK_END, ny_local_to_instant(2025, 12, 17, 23, 59, 58)),
        (PunchType.OUT, ny_local_to_instant(2025, 12, 17, 23, 59, 59)),
        (PunchType.IN, BOUNDARY),
        (PunchType.BREAK_START, BOUNDARY + timedelta(seconds=1)),
    ]
    assert result.employees[0].state_at_boundary is PunchState.BREAK

    again = engine.run_rollover_for_boundary(BOUNDARY)
    assert again.affected == 0
    assert len(punches.select_all(emp.employee_id)) == 6


def test_open_session_gets_out_and_in(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 20, 0, 0))
    mark = punches.last_id

    result = engine.run_rollover_for_now(ny_local_to_instant(2025, 12, 18, 0, 0, 30))

    assert result.boundary == BOUNDARY
    assert types_and_times(punches.inserted_after(mark)) == [
        (PunchType.OUT, BOUNDARY - timedelta(seconds=1)),
        (PunchType.IN, BOUNDARY),
    ]


def test_closed_and_inactive_employees_untouched(engine, employees, punches):
    closed = employees.add("A")
    punches.add(closed.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(closed.employee_id, "out", ny_local_to_instant(2025, 12, 17, 17, 0, 0))
    gone = employees.add("B", active=False)
    punches.add(gone.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    mark = punches.last_id

    result = engine.run_rollover_for_boundary(BOUNDARY)

    assert result.affected == 0
    assert [e.employee_id for e in result.employees] == [closed.employee_id]
    assert punches.inserted_after(mark) == []
    assert result.as_dict()["employees"] == []


def test_partial_previous_run_is_completed(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(emp.employee_id, "in", BOUNDARY)
    mark = punches.last_id

    outcome = engine.roll_employee(emp.employee_id, BOUNDARY)

    assert outcome.inserted == (PunchType.OUT,)
    assert types_and_times(punches.inserted_after(mark)) == [(PunchType.OUT, BOUNDARY - timedelta(seconds=1))]


class FailingWindow(InMemoryPunches):
    def select_range(self, employee_id, start, end):
        raise RuntimeError("store unavailable")


def test_window_query_failure_inserts_nothing(employees):
    punches = FailingWindow()
    engine = RolloverEngine(punches, employees)
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))

    with pytest.raises(RuntimeError):
        engine.run_rollover_for_boundary(BOUNDARY)
    assert len(punches.select_all(emp.employee_id)) == 1


class StaleWindow(InMemoryPunches):
    """Window query that misses rows another worker already wrote."""

    def select_range(self, employee_id, start, end):
        return []


def test_stale_window_cannot_duplicate(employees):
    punches = StaleWindow()
    engine = RolloverEngine(punches, employees)
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(emp.employee_id, "out", BOUNDARY - timedelta(seconds=1))
    punches.add(emp.employee_id, "in", BOUNDARY)

    outcome = engine.roll_employee(emp.employee_id, BOUNDARY)

    assert outcome.state_at_boundary is PunchState.IN
    assert outcome.inserted == ()
    assert len(punches.select_all(emp.employee_id)) == 3

    other = employees.add("B")
    punches.add(other.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(other.employee_id, "in", BOUNDARY)
    outcome = engine.roll_employee(other.employee_id, BOUNDARY)

    assert outcome.inserted == (PunchType.OUT,)
    in_rows = [p for p in punches.select_all(other.employee_id) if p.punched_at == BOUNDARY]
    assert len(in_rows) == 1


def test_several_employees_in_one_pass(engine, employees, punches):
    a = employees.add("A")
    b = employees.add("B")
    c = employees.add("C")
    punches.add(a.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(b.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(b.employee_id, "break_start", ny_local_to_instant(2025, 12, 17, 23, 0, 0))

    result = engine.run_rollover_for_boundary(BOUNDARY)

    assert result.affected == 6
    payload = result.as_dict()
    assert payload["civil_date"] == "2025-12-18"
    assert payload["affected"] == 6
    assert {e["employee_id"]: e["state"] for e in payload["employees"]} == {
        a.employee_id: "in",
        b.employee_id: "break",
    }
    assert punches.select_all(c.employee_id) == []


def test_backfill_closes_every_missed_midnight_oldest_first(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 15, 9, 0, 0))
    mark = punches.last_id
    now = ny_local_to_instant(2025, 12, 18, 9, 0, 0)

    inserted = engine.ensure_backfill_for_user(emp.employee_id, 3, now=now)

    assert inserted == 6
    rows = punches.inserted_after(mark)
    assert [p.punch_type for p in rows] == [PunchType.OUT, PunchType.IN] * 3
    assert rows[0].punched_at == ny_local_to_instant(2025, 12, 15, 23, 59, 59)
    assert rows[-1].punched_at == BOUNDARY
    assert [p.punched_at for p in rows] == sorted(p.punched_at for p in rows)

    assert engine.ensure_backfill_for_user(emp.employee_id, 3, now=now) == 0


def test_backfill_skips_inactive_and_unknown(engine, employees, punches):
    emp = employees.add("A", active=False)
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 15, 9, 0, 0))

    assert engine.ensure_backfill_for_user(emp.employee_id, 7) == 0
    assert engine.ensure_backfill_for_user(404, 7) == 0


def test_backfill_keeps_break_open_across_days(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 16, 9, 0, 0))
    punches.add(emp.employee_id, "break_start", ny_local_to_instant(2025, 12, 16, 12, 0, 0))

    inserted = engine.ensure_backfill_for_user(emp.employee_id, 2, now=ny_local_to_instant(2025, 12, 18, 8, 0, 0))

    assert inserted == 8
    last = punches.select_most_recent(emp.employee_id)
    assert last.punch_type == PunchType.BREAK_START
    assert last.punched_at == BOUNDARY + timedelta(seconds=1)


def test_backfill_across_month_end(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 2, 27, 10, 0, 0))
    mark = punches.last_id

    inserted = engine.ensure_backfill_for_user(emp.employee_id, 3, now=ny_local_to_instant(2025, 3, 1, 8, 0, 0))

    assert inserted == 4
    ins = [p.punched_at for p in punches.inserted_after(mark) if p.punch_type == PunchType.IN]
    assert ins == [boundary_for(date(2025, 2, 28)), boundary_for(date(2025, 3, 1))]


def test_deleted_synthetic_punch_is_restored_on_rerun(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    engine.run_rollover_for_boundary(BOUNDARY)
    synthetic_in = punches.select_most_recent(emp.employee_id)

    assert punches.delete(synthetic_in.punch_id)
    assert not punches.delete(synthetic_in.punch_id)

    outcome = engine.roll_employee(emp.employee_id, BOUNDARY)
    assert outcome.inserted == (PunchType.IN,)


def test_cut_interrupted_after_break_end_is_completed(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(emp.employee_id, "break_start", ny_local_to_instant(2025, 12, 17, 22, 0, 0))
    punches.add(emp.employee_id, "break_end", BOUNDARY - timedelta(seconds=2))
    mark = punches.last_id

    outcome = engine.roll_employee(emp.employee_id, BOUNDARY)

    assert outcome.state_at_boundary is PunchState.BREAK
    assert [p.punch_type for p in punches.inserted_after(mark)] == [
        PunchType.OUT,
        PunchType.IN,
        PunchType.BREAK_START,
    ]


def test_real_punch_out_before_midnight_is_left_alone(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 12, 17, 9, 0, 0))
    punches.add(emp.employee_id, "out", BOUNDARY - timedelta(seconds=5))

    assert engine.roll_employee(emp.employee_id, BOUNDARY).inserted == ()


def test_fall_back_night_never_writes_future_punches(engine, employees, punches):
    emp = employees.add("A")
    punches.add(emp.employee_id, "in", ny_local_to_instant(2025, 11, 1, 18, 0, 0))
    # Real NY midnight of 2025-11-02 is 04:00Z while the day's boundary is 05:00Z.
    just_after_midnight = datetime(2025, 11, 2, 4, 0, 1, tzinfo=timezone.utc)

    result = engine.run_rollover_for_now(just_after_midnight)
    backfilled = engine.ensure_backfill_for_user(emp.employee_id, 2, now=just_after_midnight)

    assert result.affected == 0
    assert backfilled == 0
    assert len(punches.select_all(emp.employee_id)) == 1
    assert engine.run_rollover_for_now(datetime(2025, 11, 2, 5, 0, 1, tzinfo=timezone.utc)).affected == 2
