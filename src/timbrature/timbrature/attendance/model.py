from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.geo import GeoPoint
from ..core.enums import AttendanceStatus, ClockEventKind, OvertimeType


@dataclass(frozen=True)
class ClockEvent:
    """Entità di dominio: una timbratura (entrata o uscita) legata a un turno.

    Append-only: le correzioni non modificano ``event_time``.
    """

    event_id: int
    shift_id: int
    kind: ClockEventKind
    event_time: datetime
    status: AttendanceStatus
    location: Optional[GeoPoint] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShiftBreak:
    break_id: int
    shift_id: int
    break_start: datetime
    break_end: Optional[datetime] = None
    duration_minutes: int = 0
    break_type: str = "General"
    is_short_break: bool = False
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.break_end is None


@dataclass(frozen=True)
class OvertimeRecord:
    overtime_id: int
    shift_id: int
    employee_id: int
    merchant_id: int
    work_date: date
    duration_minutes: int
    overtime_type: OvertimeType = OvertimeType.PENDING
    employee_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewOvertime:
    """Overtime detected at check-out; stored as Pending with the clock event."""

    employee_id: int
    merchant_id: int
    work_date: date
    duration_minutes: int


@dataclass(frozen=True)
class RecordedClockEvent:
    event_id: int
    anomaly_ids: tuple[int, ...] = ()
    overtime_id: Optional[int] = None
