from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..common.datetime_utils import as_utc
from ..core.enums import PunchState, PunchType
from .model import PunchEvent, sort_punches


def state_at(punches: Iterable[PunchEvent], boundary: datetime) -> PunchState:
    """Punch state as of ``boundary`` (inclusive).

    Pure and total: punches may come in any order, malformed sequences are
    folded by the same rules, and no punches at all means ``out``.
    """

    boundary = as_utc(boundary)
    state = PunchState.OUT
    for punch in sort_punches(p for p in punches if p.punched_at <= boundary):
        if punch.punch_type == PunchType.IN:
            state = PunchState.IN
        elif punch.punch_type == PunchType.BREAK_START:
            # A break only starts from an open, working session.
            if state is PunchState.IN:
                state = PunchState.BREAK
        elif punch.punch_type == PunchType.BREAK_END:
            state = PunchState.IN
        elif punch.punch_type == PunchType.OUT:
            state = PunchState.OUT
    return state
