from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from ...common.datetime_utils import as_utc
from ...core.enums import PunchType
from ...punches.model import PunchEvent, sort_punches
from .base import HoursCalculator

logger = logging.getLogger(__name__)


def _minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: sum of open-session time, breaks excluded.

    Single forward pass. Work time is flushed into the total at
    ``break_start`` and at ``out``; an ``in`` while a session is already open
    restarts the clock and the unflushed time is dropped. Malformed sequences
    never raise, they only shrink the total.
    """

    def worked_minutes(self, punches: Iterable[PunchEvent], open_end: Optional[datetime] = None) -> float:
        total = 0.0
        session_start: Optional[datetime] = None
        on_break = False

        for punch in sort_punches(punches):
            at = punch.punched_at

            if punch.punch_type == PunchType.IN:
                session_start = at
                on_break = False

            elif punch.punch_type == PunchType.BREAK_START:
                if session_start is None:
                    logger.warning("break_start without punch in at %s, ignoring", at.isoformat())
                elif not on_break:
                    total += _minutes_between(session_start, at)
                    on_break = True

            elif punch.punch_type == PunchType.BREAK_END:
                if not on_break:
                    logger.warning("break_end without break_start at %s, treating as punch in", at.isoformat())
                session_start = at
                on_break = False

            elif punch.punch_type == PunchType.OUT:
                if session_start is None:
                    logger.warning("punch out without punch in at %s, ignoring", at.isoformat())
                elif not on_break:
                    total += _minutes_between(session_start, at)
                # Out while on break adds nothing: the worked part was flushed at break_start.
                session_start = None
                on_break = False

        if session_start is not None and not on_break and open_end is not None:
            total += _minutes_between(session_start, as_utc(open_end))

        return total


_default = StandardHoursCalculator()


def worked_minutes(punches: Iterable[PunchEvent], open_end: Optional[datetime] = None) -> float:
    return _default.worked_minutes(punches, open_end)


def hours_worked(punches: Iterable[PunchEvent], open_end: Optional[datetime] = None) -> float:
    return _default.hours_worked(punches, open_end)
