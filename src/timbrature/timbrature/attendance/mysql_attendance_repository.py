from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..anomalies.model import NewAnomaly
from ..anomalies.mysql_anomaly_repository import insert_anomaly
from ..common.geo import GeoPoint
from ..core.enums import AttendanceStatus, ClockEventKind, OvertimeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import ClockEvent, NewOvertime, OvertimeRecord, RecordedClockEvent, ShiftBreak
from .repository import BreakRepository, ClockEventRepository, OvertimeRepository

logger = logging.getLogger(__name__)

_EVENT_COLUMNS = "event_id, shift_id, kind, event_time, status, latitude, longitude, notes"
_BREAK_COLUMNS = "break_id, shift_id, break_start, break_end, duration_minutes, break_type, is_short_break, notes"
_OVERTIME_COLUMNS = (
    "overtime_id, shift_id, employee_id, merchant_id, work_date, duration_minutes, "
    "overtime_type, employee_notes, created_at, updated_at"
)


def _to_event(r: Dict[str, Any]) -> ClockEvent:
    location = None
    if r.get("latitude") is not None and r.get("longitude") is not None:
        location = GeoPoint(latitude=float(r["latitude"]), longitude=float(r["longitude"]))
    return ClockEvent(
        event_id=int(r["event_id"]),
        shift_id=int(r["shift_id"]),
        kind=ClockEventKind(r["kind"]),
        event_time=r["event_time"],
        status=AttendanceStatus(r["status"]),
        location=location,
        notes=r.get("notes"),
    )


def _to_break(r: Dict[str, Any]) -> ShiftBreak:
    return ShiftBreak(
        break_id=int(r["break_id"]),
        shift_id=int(r["shift_id"]),
        break_start=r["break_start"],
        break_end=r.get("break_end"),
        duration_minutes=int(r.get("duration_minutes") or 0),
        break_type=r.get("break_type") or "General",
        is_short_break=bool(r.get("is_short_break")),
        notes=r.get("notes"),
    )


def _to_overtime(r: Dict[str, Any]) -> OvertimeRecord:
    return OvertimeRecord(
        overtime_id=int(r["overtime_id"]),
        shift_id=int(r["shift_id"]),
        employee_id=int(r["employee_id"]),
        merchant_id=int(r["merchant_id"]),
        work_date=r["work_date"],
        duration_minutes=int(r["duration_minutes"]),
        overtime_type=OvertimeType(r["overtime_type"]),
        employee_notes=r.get("employee_notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _insert_overtime(cur, *, shift_id: int, overtime: NewOvertime, created_at: datetime) -> int:
    cur.execute(
        """
        INSERT INTO overtime_records(
            shift_id, employee_id, merchant_id, work_date, duration_minutes, overtime_type, created_at
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(shift_id),
            int(overtime.employee_id),
            int(overtime.merchant_id),
            overtime.work_date,
            int(overtime.duration_minutes),
            OvertimeType.PENDING.value,
            created_at,
        ),
    )
    return int(cur.lastrowid)


class MySQLClockEventRepository(ClockEventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_shift(self, shift_id: int, kind: ClockEventKind) -> Optional[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EVENT_COLUMNS} FROM clock_events WHERE shift_id=%s AND kind=%s",
                (int(shift_id), kind.value),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_for_shifts(self, shift_ids: Sequence[int]) -> Sequence[ClockEvent]:
        if not shift_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM clock_events
                WHERE shift_id IN ({in_clause(shift_ids)})
                ORDER BY event_time ASC
                """,
                tuple(int(s) for s in shift_ids),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def record(
        self,
        *,
        shift_id: int,
        kind: ClockEventKind,
        event_time: datetime,
        status: AttendanceStatus,
        location: Optional[GeoPoint] = None,
        notes: Optional[str] = None,
        anomalies: Sequence[NewAnomaly] = (),
        overtime: Optional[NewOvertime] = None,
    ) -> Optional[RecordedClockEvent]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO clock_events(shift_id, kind, event_time, status, latitude, longitude, notes)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(shift_id),
                        kind.value,
                        event_time,
                        status.value,
                        location.latitude if location else None,
                        location.longitude if location else None,
                        notes,
                    ),
                )
                event_id = int(cur.lastrowid)
                anomaly_ids = tuple(
                    insert_anomaly(cur, shift_id=shift_id, anomaly=a, created_at=event_time) for a in anomalies
                )
                overtime_id = None
                if overtime is not None:
                    overtime_id = _insert_overtime(cur, shift_id=shift_id, overtime=overtime, created_at=event_time)
                return RecordedClockEvent(event_id=event_id, anomaly_ids=anomaly_ids, overtime_id=overtime_id)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                logger.warning("Duplicate %s rejected by unique key for shift %s", kind.value, shift_id)
                return None
            raise


class MySQLBreakRepository(BreakRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, break_id: int) -> Optional[ShiftBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_BREAK_COLUMNS} FROM shift_breaks WHERE break_id=%s", (int(break_id),))
            r = fetchone(cur)
            return _to_break(r) if r else None

    def get_open_for_shift(self, shift_id: int) -> Optional[ShiftBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_BREAK_COLUMNS}
                FROM shift_breaks
                WHERE shift_id=%s AND break_end IS NULL
                ORDER BY break_start DESC
                LIMIT 1
                """,
                (int(shift_id),),
            )
            r = fetchone(cur)
            return _to_break(r) if r else None

    def list_for_shift(self, shift_id: int) -> Sequence[ShiftBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_BREAK_COLUMNS} FROM shift_breaks WHERE shift_id=%s ORDER BY break_start ASC",
                (int(shift_id),),
            )
            return [_to_break(r) for r in fetchall(cur)]

    def start(
        self, *, shift_id: int, break_start: datetime, break_type: str, notes: Optional[str] = None
    ) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO shift_breaks(shift_id, break_start, break_type, notes)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(shift_id), break_start, break_type, notes),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                logger.warning("Second open break rejected by unique key for shift %s", shift_id)
                return None
            raise

    def finish(self, *, break_id: int, break_end: datetime, duration_minutes: int, is_short_break: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_breaks
                SET break_end=%s, duration_minutes=%s, is_short_break=%s
                WHERE break_id=%s AND break_end IS NULL
                """,
                (break_end, int(duration_minutes), 1 if is_short_break else 0, int(break_id)),
            )
            return cur.rowcount > 0


class MySQLOvertimeRepository(OvertimeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, overtime_id: int) -> Optional[OvertimeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_OVERTIME_COLUMNS} FROM overtime_records WHERE overtime_id=%s", (int(overtime_id),))
            r = fetchone(cur)
            return _to_overtime(r) if r else None

    def set_type(
        self,
        *,
        overtime_id: int,
        overtime_type: OvertimeType,
        employee_notes: Optional[str],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE overtime_records
                SET overtime_type=%s, employee_notes=COALESCE(%s, employee_notes), updated_at=%s
                WHERE overtime_id=%s
                """,
                (overtime_type.value, employee_notes, updated_at, int(overtime_id)),
            )
            return cur.rowcount > 0
