from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class WorkedHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def worked_minutes(self, *, check_in: datetime, check_out: Optional[datetime], break_minutes: int) -> int:
        raise NotImplementedError
