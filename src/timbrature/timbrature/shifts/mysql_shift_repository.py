from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ScheduledShift
from .repository import ShiftRepository

_COLUMNS = "shift_id, merchant_id, employee_id, work_date, planned_start, planned_end, planned_break_minutes"


def _to_shift(r: Dict[str, Any]) -> ScheduledShift:
    return ScheduledShift(
        shift_id=int(r["shift_id"]),
        merchant_id=int(r["merchant_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        planned_start=normalize_mysql_time(r.get("planned_start")),
        planned_end=normalize_mysql_time(r.get("planned_end")),
        planned_break_minutes=int(r.get("planned_break_minutes") or 0),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE employee_id=%s AND work_date=%s
                ORDER BY planned_start ASC
                LIMIT 1
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Sequence[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, planned_start ASC
                """,
                (int(employee_id), start, end),
            )
            return [_to_shift(r) for r in fetchall(cur)]

    def list_for_merchant(self, *, merchant_id: int, work_date: date) -> Sequence[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE merchant_id=%s AND work_date=%s
                ORDER BY planned_start ASC, employee_id ASC
                """,
                (int(merchant_id), work_date),
            )
            return [_to_shift(r) for r in fetchall(cur)]
