from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import ClockEventKind, CorrectionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ClockCorrection
from .repository import CorrectionRepository

_COLUMNS = (
    "correction_id, shift_id, employee_id, kind, original_time, corrected_time, reason, "
    "is_within_window, status, decided_by, decided_at, created_at"
)


def _to_correction(r: Dict[str, Any]) -> ClockCorrection:
    return ClockCorrection(
        correction_id=int(r["correction_id"]),
        shift_id=int(r["shift_id"]),
        employee_id=int(r["employee_id"]),
        kind=ClockEventKind(r["kind"]),
        original_time=r["original_time"],
        corrected_time=r["corrected_time"],
        status=CorrectionStatus(r["status"]),
        created_at=r["created_at"],
        reason=r.get("reason"),
        is_within_window=bool(r.get("is_within_window")),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        decided_at = created_at if status != CorrectionStatus.PENDING else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clock_corrections(
                    shift_id, employee_id, kind, original_time, corrected_time, reason,
                    is_within_window, status, decided_by, decided_at, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(shift_id),
                    int(employee_id),
                    kind.value,
                    original_time,
                    corrected_time,
                    reason,
                    1 if is_within_window else 0,
                    status.value,
                    decided_by,
                    decided_at,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, correction_id: int) -> Optional[ClockCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM clock_corrections WHERE correction_id=%s", (int(correction_id),))
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def latest_approved(self, shift_id: int, kind: ClockEventKind) -> Optional[ClockCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_corrections
                WHERE shift_id=%s AND kind=%s AND status=%s
                ORDER BY decided_at DESC, correction_id DESC
                LIMIT 1
                """,
                (int(shift_id), kind.value, CorrectionStatus.APPROVED.value),
            )
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def decide(self, *, correction_id: int, status: CorrectionStatus, decided_by: str, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clock_corrections
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE correction_id=%s AND status=%s
                """,
                (status.value, decided_by, decided_at, int(correction_id), CorrectionStatus.PENDING.value),
            )
            return cur.rowcount > 0
