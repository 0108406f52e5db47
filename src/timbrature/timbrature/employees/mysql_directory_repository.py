from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.geo import GeoPoint
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee, Merchant, WorkingHoursLimit
from .repository import DirectoryRepository


def _float_or_none(value) -> Optional[float]:
    return float(value) if value is not None else None


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id, merchant_id, full_name, is_active FROM employees WHERE employee_id=%s",
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                merchant_id=int(r["merchant_id"]),
                full_name=r["full_name"],
                is_active=bool(r.get("is_active", 1)),
            )

    def get_merchant(self, merchant_id: int) -> Optional[Merchant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT merchant_id, business_name, latitude, longitude, geofence_radius_meters
                FROM merchants
                WHERE merchant_id=%s
                """,
                (int(merchant_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            location = None
            if r.get("latitude") is not None and r.get("longitude") is not None:
                location = GeoPoint(latitude=float(r["latitude"]), longitude=float(r["longitude"]))
            return Merchant(
                merchant_id=int(r["merchant_id"]),
                business_name=r["business_name"],
                location=location,
                geofence_radius_meters=_float_or_none(r.get("geofence_radius_meters")),
            )

    def get_active_limit(self, *, employee_id: int, on: date) -> Optional[WorkingHoursLimit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, max_hours_per_week, max_overtime_hours_per_week
                FROM working_hours_limits
                WHERE employee_id=%s AND is_active=1
                  AND valid_from <= %s AND (valid_to IS NULL OR valid_to >= %s)
                ORDER BY valid_from DESC
                LIMIT 1
                """,
                (int(employee_id), on, on),
            )
            r = fetchone(cur)
            if not r:
                return None
            return WorkingHoursLimit(
                employee_id=int(r["employee_id"]),
                max_hours_per_week=_float_or_none(r.get("max_hours_per_week")),
                max_overtime_hours_per_week=_float_or_none(r.get("max_overtime_hours_per_week")),
            )
