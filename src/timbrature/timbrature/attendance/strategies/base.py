from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...anomalies.model import NewAnomaly
from ...core.enums import AttendanceStatus
from ...core.settings import TimbratureSettings


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    anomaly: Optional[NewAnomaly] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a clock event is classified.

    ``delta_minutes`` is actual minus planned (positive means late).
    """

    @abstractmethod
    def decide_checkin(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, delta_minutes: int, settings: TimbratureSettings) -> StatusDecision:
        raise NotImplementedError
