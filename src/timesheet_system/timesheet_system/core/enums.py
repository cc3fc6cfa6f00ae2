from __future__ import annotations

from enum import Enum


class PunchType(str, Enum):
    """Employee action stored in the punch log."""

    IN = "in"
    OUT = "out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class PunchState(str, Enum):
    """Derived punch state of an employee at some instant."""

    OUT = "out"
    IN = "in"
    BREAK = "break"
