from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: Plain data object (no DB access). Only ``active`` employees take
    part in midnight rollover and backfill.
    """

    employee_id: int
    name: str
    email: str
    username: str
    is_admin: bool = False
    active: bool = True
    created_at: Optional[datetime] = None
