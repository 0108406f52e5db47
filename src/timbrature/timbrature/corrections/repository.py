from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import ClockEventKind, CorrectionStatus
from .model import ClockCorrection


class CorrectionRepository(Protocol):
    def create(
        self,
        *,
        shift_id: int,
        employee_id: int,
        kind: ClockEventKind,
        original_time: datetime,
        corrected_time: datetime,
        reason: Optional[str],
        is_within_window: bool,
        status: CorrectionStatus,
        created_at: datetime,
        decided_by: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, correction_id: int) -> Optional[ClockCorrection]:
        raise NotImplementedError

    def latest_approved(self, shift_id: int, kind: ClockEventKind) -> Optional[ClockCorrection]:
        raise NotImplementedError

    def decide(self, *, correction_id: int, status: CorrectionStatus, decided_by: str, decided_at: datetime) -> bool:
        """Only a PENDING correction can be decided; ``False`` otherwise."""

        raise NotImplementedError
