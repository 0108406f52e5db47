from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ClockEventKind, CorrectionStatus


@dataclass(frozen=True)
class ClockCorrection:
    """Correzione proposta dal dipendente per una timbratura.

    La timbratura originale resta invariata; conta l'ultima correzione approvata.
    """

    correction_id: int
    shift_id: int
    employee_id: int
    kind: ClockEventKind
    original_time: datetime
    corrected_time: datetime
    status: CorrectionStatus
    created_at: datetime
    reason: Optional[str] = None
    is_within_window: bool = False
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None


def effective_time(original: datetime, latest_approved: Optional[ClockCorrection]) -> datetime:
    if latest_approved is None or latest_approved.status != CorrectionStatus.APPROVED:
        return original
    return latest_approved.corrected_time
