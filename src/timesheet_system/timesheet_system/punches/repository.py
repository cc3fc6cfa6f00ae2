from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PunchType
from .model import PunchEvent


class PunchRepository(Protocol):
    """Append-only punch log.

    Note (DIP): services depend on this interface, not on a concrete DB.
    Every ``select_*`` returns punches ordered by ``punched_at`` ascending
    unless stated otherwise.
    """

    def insert(
        self,
        employee_id: int,
        punch_type: PunchType,
        punched_at: Optional[datetime] = None,
    ) -> PunchEvent:
        """Append a punch; the store assigns "now" when ``punched_at`` is omitted."""

        raise NotImplementedError

    def insert_if_absent(self, employee_id: int, punch_type: PunchType, punched_at: datetime) -> bool:
        """Append unless an identical (employee, type, instant) punch exists."""

        raise NotImplementedError

    def select_range(self, employee_id: int, start: datetime, end: datetime) -> Sequence[PunchEvent]:
        """Punches with ``start <= punched_at <= end``."""

        raise NotImplementedError

    def select_up_to(self, employee_id: int, instant: datetime) -> Sequence[PunchEvent]:
        raise NotImplementedError

    def select_most_recent(self, employee_id: int) -> Optional[PunchEvent]:
        raise NotImplementedError

    def select_recent(self, employee_id: int, limit: int) -> Sequence[PunchEvent]:
        """Newest first."""

        raise NotImplementedError

    def select_all(self, employee_id: int) -> Sequence[PunchEvent]:
        raise NotImplementedError

    def delete(self, punch_id: int) -> bool:
        raise NotImplementedError

    def delete_matching(self, employee_id: int, punch_type: PunchType, punched_at: datetime) -> int:
        """Administrative removal; returns the number of deleted rows."""

        raise NotImplementedError
