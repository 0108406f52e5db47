from __future__ import annotations

from datetime import datetime
from typing import Optional

from .base import WorkedHoursCalculator


class StandardHoursCalculator(WorkedHoursCalculator):
    """Standard rule: (out - in) - break_minutes, not below 0."""

    def worked_minutes(self, *, check_in: datetime, check_out: Optional[datetime], break_minutes: int) -> int:
        if not check_out:
            return 0
        minutes = int((check_out - check_in).total_seconds() // 60)
        minutes -= int(break_minutes or 0)
        return max(minutes, 0)
