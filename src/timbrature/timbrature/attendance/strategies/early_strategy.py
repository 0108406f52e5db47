from __future__ import annotations

from ...anomalies.model import NewAnomaly
from ...core.enums import AnomalyType, AttendanceStatus
from ...core.settings import TimbratureSettings
from .. import messages
from .base import AttendanceStrategy, StatusDecision


class EarlyStrategy(AttendanceStrategy):
    """Early arrival or early leave (before tolerance)."""

    def decide_checkin(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.EARLY,
            anomaly=NewAnomaly(
                anomaly_type=AnomalyType.EARLY_CHECK_IN,
                severity=1,
                deviation_minutes=delta_minutes,
                empathetic_message=messages.early_check_in(),
            ),
        )

    def decide_checkout(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.EARLY,
            anomaly=NewAnomaly(
                anomaly_type=AnomalyType.EARLY_CHECK_OUT,
                severity=2,
                deviation_minutes=delta_minutes,
                empathetic_message=messages.early_check_out(),
            ),
        )
