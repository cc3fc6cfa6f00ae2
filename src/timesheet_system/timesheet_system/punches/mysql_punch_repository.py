from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import PunchType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import PunchEvent
from .repository import PunchRepository

_COLUMNS = "punch_id, employee_id, punch_type, punched_at"


def _to_punch(r: dict) -> PunchEvent:
    return PunchEvent(
        punch_id=int(r["punch_id"]),
        employee_id=int(r["employee_id"]),
        punch_type=PunchType(r["punch_type"]),
        punched_at=from_db_datetime(r["punched_at"]),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(
        self,
        employee_id: int,
        punch_type: PunchType,
        punched_at: Optional[datetime] = None,
    ) -> PunchEvent:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO punches(employee_id, punch_type, punched_at)
                VALUES(%s, %s, COALESCE(%s, UTC_TIMESTAMP()))
                """,
                (int(employee_id), punch_type.value, to_db_datetime(punched_at)),
            )
            punch_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM punches WHERE punch_id=%s", (punch_id,))
            return _to_punch(fetchone(cur))

    def insert_if_absent(self, employee_id: int, punch_type: PunchType, punched_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO punches(employee_id, punch_type, punched_at)
                VALUES(%s, %s, %s)
                """,
                (int(employee_id), punch_type.value, to_db_datetime(punched_at)),
            )
            return cur.rowcount > 0

    def select_range(self, employee_id: int, start: datetime, end: datetime) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE employee_id=%s AND punched_at BETWEEN %s AND %s
                ORDER BY punched_at ASC, punch_id ASC
                """,
                (int(employee_id), to_db_datetime(start), to_db_datetime(end)),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def select_up_to(self, employee_id: int, instant: datetime) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE employee_id=%s AND punched_at <= %s
                ORDER BY punched_at ASC, punch_id ASC
                """,
                (int(employee_id), to_db_datetime(instant)),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def select_most_recent(self, employee_id: int) -> Optional[PunchEvent]:
        recent = self.select_recent(employee_id, 1)
        return recent[0] if recent else None

    def select_recent(self, employee_id: int, limit: int) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE employee_id=%s
                ORDER BY punched_at DESC, punch_id DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def select_all(self, employee_id: int) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE employee_id=%s
                ORDER BY punched_at ASC, punch_id ASC
                """,
                (int(employee_id),),
            )
            return [_to_punch(r) for r in fetchall(cur)]

    def delete(self, punch_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM punches WHERE punch_id=%s", (int(punch_id),))
            return cur.rowcount > 0

    def delete_matching(self, employee_id: int, punch_type: PunchType, punched_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM punches
                WHERE employee_id=%s AND punch_type=%s AND punched_at=%s
                """,
                (int(employee_id), punch_type.value, to_db_datetime(punched_at)),
            )
            return int(cur.rowcount)
