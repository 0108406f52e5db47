from __future__ import annotations

from ...anomalies.model import NewAnomaly
from ...core.enums import AnomalyType, AttendanceStatus
from ...core.settings import TimbratureSettings
from .. import messages
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in or late check-out (past tolerance)."""

    def decide_checkin(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        serious = delta_minutes > settings.late_severity_minutes
        return StatusDecision(
            status=AttendanceStatus.LATE,
            anomaly=NewAnomaly(
                anomaly_type=AnomalyType.LATE_CHECK_IN,
                severity=3 if serious else 2,
                deviation_minutes=delta_minutes,
                empathetic_message=messages.late_check_in(delta_minutes),
                requires_merchant_review=serious,
            ),
        )

    def decide_checkout(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            anomaly=NewAnomaly(
                anomaly_type=AnomalyType.LATE_CHECK_OUT,
                severity=2,
                deviation_minutes=delta_minutes,
                empathetic_message=messages.late_check_out(),
            ),
        )
