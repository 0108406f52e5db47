from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.enums import AnomalyReason, AnomalyType, ValidationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Anomaly, NewAnomaly
from .repository import AnomalyRepository

_COLUMNS = (
    "a.anomaly_id, a.shift_id, a.anomaly_type, a.status, a.severity, a.deviation_minutes, "
    "a.empathetic_message, a.requires_merchant_review, a.resolution_reason, a.resolution_notes, "
    "a.resolved_by, a.resolved_at, a.created_at"
)


def _to_anomaly(r: Dict[str, Any]) -> Anomaly:
    reason = r.get("resolution_reason")
    deviation = r.get("deviation_minutes")
    return Anomaly(
        anomaly_id=int(r["anomaly_id"]),
        shift_id=int(r["shift_id"]),
        anomaly_type=AnomalyType(r["anomaly_type"]),
        status=ValidationStatus(r["status"]),
        created_at=r["created_at"],
        severity=int(r.get("severity") or 1),
        deviation_minutes=int(deviation) if deviation is not None else None,
        empathetic_message=r.get("empathetic_message") or "",
        requires_merchant_review=bool(r.get("requires_merchant_review")),
        resolution_reason=AnomalyReason(reason) if reason else None,
        resolution_notes=r.get("resolution_notes"),
        resolved_by=r.get("resolved_by"),
        resolved_at=r.get("resolved_at"),
    )


def insert_anomaly(cur, *, shift_id: int, anomaly: NewAnomaly, created_at: datetime) -> int:
    """Insert a Pending anomaly on the caller's cursor; the caller owns the transaction."""

    cur.execute(
        """
        INSERT INTO anomalies(
            shift_id, anomaly_type, status, severity, deviation_minutes,
            empathetic_message, requires_merchant_review, created_at
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(shift_id),
            anomaly.anomaly_type.value,
            ValidationStatus.PENDING.value,
            int(anomaly.severity),
            anomaly.deviation_minutes,
            anomaly.empathetic_message,
            1 if anomaly.requires_merchant_review else 0,
            created_at,
        ),
    )
    return int(cur.lastrowid)


class MySQLAnomalyRepository(AnomalyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, anomaly_id: int) -> Optional[Anomaly]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM anomalies a WHERE a.anomaly_id=%s", (int(anomaly_id),))
            r = fetchone(cur)
            return _to_anomaly(r) if r else None

    def list_for_shifts(self, shift_ids: Sequence[int]) -> Sequence[Anomaly]:
        if not shift_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM anomalies a
                WHERE a.shift_id IN ({in_clause(shift_ids)})
                ORDER BY a.created_at ASC, a.anomaly_id ASC
                """,
                tuple(int(s) for s in shift_ids),
            )
            return [_to_anomaly(r) for r in fetchall(cur)]

    def list_for_merchant(self, *, merchant_id: int, statuses: Iterable[ValidationStatus]) -> Sequence[Anomaly]:
        status_values = [s.value for s in statuses]
        if not status_values:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM anomalies a
                JOIN shifts s ON s.shift_id = a.shift_id
                WHERE s.merchant_id=%s AND a.status IN ({in_clause(status_values)})
                ORDER BY a.created_at ASC, a.anomaly_id ASC
                """,
                (int(merchant_id), *status_values),
            )
            return [_to_anomaly(r) for r in fetchall(cur)]

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
        from_values = [s.value for s in from_statuses]
        if not from_values:
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE anomalies
                SET status=%s,
                    resolution_reason=COALESCE(%s, resolution_reason),
                    resolution_notes=COALESCE(%s, resolution_notes),
                    resolved_by=COALESCE(%s, resolved_by),
                    resolved_at=COALESCE(%s, resolved_at)
                WHERE anomaly_id=%s AND status IN ({in_clause(from_values)})
                """,
                (
                    to_status.value,
                    reason.value if reason else None,
                    notes,
                    resolved_by,
                    resolved_at,
                    int(anomaly_id),
                    *from_values,
                ),
            )
            return cur.rowcount > 0
