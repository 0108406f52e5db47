from __future__ import annotations

from dataclasses import dataclass

from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    Symmetric tolerance: ``|delta| <= tolerance`` is on time.
    """

    def for_checkin(self, *, delta_minutes: int, tolerance_minutes: int) -> AttendanceStrategy:
        return self._for_delta(delta_minutes, tolerance_minutes)

    def for_checkout(self, *, delta_minutes: int, tolerance_minutes: int) -> AttendanceStrategy:
        return self._for_delta(delta_minutes, tolerance_minutes)

    @staticmethod
    def _for_delta(delta_minutes: int, tolerance_minutes: int) -> AttendanceStrategy:
        if abs(delta_minutes) <= tolerance_minutes:
            return OnTimeStrategy()
        if delta_minutes > 0:
            return LateStrategy()
        return EarlyStrategy()
