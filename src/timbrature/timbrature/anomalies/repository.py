from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AnomalyReason, ValidationStatus
from .model import Anomaly


class AnomalyRepository(Protocol):
    def get_by_id(self, anomaly_id: int) -> Optional[Anomaly]:
        raise NotImplementedError

    def list_for_shifts(self, shift_ids: Sequence[int]) -> Sequence[Anomaly]:
        raise NotImplementedError

    def list_for_merchant(self, *, merchant_id: int, statuses: Iterable[ValidationStatus]) -> Sequence[Anomaly]:
        """Anomalies of the merchant's shifts currently in one of ``statuses``."""

        raise NotImplementedError

    def transition(
        self,
        *,
        anomaly_id: int,
        from_statuses: Iterable[ValidationStatus],
        to_status: ValidationStatus,
        reason: Optional[AnomalyReason] = None,
        resolved_by: Optional[str] = None,
        resolved_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """Compare-and-set on ``status``.

        Writes only if the stored status is still one of ``from_statuses``;
        ``reason`` is kept when already set and ``None`` is passed.
        Returns ``False`` when another writer got there first.
        """

        raise NotImplementedError
