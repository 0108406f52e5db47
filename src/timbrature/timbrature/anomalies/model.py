from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AnomalyReason, AnomalyType, ValidationStatus


@dataclass(frozen=True)
class Anomaly:
    """Scostamento segnalato tra orario pianificato e timbratura reale.

    Mai cancellata: cambia solo ``status`` (transizioni monotone) e i campi di risoluzione.
    """

    anomaly_id: int
    shift_id: int
    anomaly_type: AnomalyType
    status: ValidationStatus
    created_at: datetime
    severity: int = 1
    deviation_minutes: Optional[int] = None
    empathetic_message: str = ""
    requires_merchant_review: bool = False
    resolution_reason: Optional[AnomalyReason] = None
    resolution_notes: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return not self.status.is_terminal


@dataclass(frozen=True)
class NewAnomaly:
    """What the engine decided to open; persisted as a Pending anomaly."""

    anomaly_type: AnomalyType
    severity: int
    deviation_minutes: Optional[int]
    empathetic_message: str
    requires_merchant_review: bool = False
