from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from ...punches.model import PunchEvent


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def worked_minutes(self, punches: Iterable[PunchEvent], open_end: Optional[datetime] = None) -> float:
        raise NotImplementedError

    def hours_worked(self, punches: Iterable[PunchEvent], open_end: Optional[datetime] = None) -> float:
        return self.worked_minutes(punches, open_end) / 60
