from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PunchType


@dataclass(frozen=True)
class PunchEvent:
    """Domain entity: one timestamped employee action.

    Note: ``punched_at`` is always an aware UTC instant. Punches are never
    mutated; corrections are deletions plus new inserts.
    """

    employee_id: int
    punch_type: PunchType
    punched_at: datetime
    punch_id: Optional[int] = None


def sort_punches(punches) -> list[PunchEvent]:
    return sorted(punches, key=lambda p: p.punched_at)
