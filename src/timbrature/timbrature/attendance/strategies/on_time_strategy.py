from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...core.settings import TimbratureSettings
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Within tolerance: nothing to flag."""

    def decide_checkin(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)

    def decide_checkout(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)
