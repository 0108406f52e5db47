from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..anomalies.model import NewAnomaly
from ..common.geo import GeoPoint
from ..core.enums import AttendanceStatus, ClockEventKind, OvertimeType
from .model import ClockEvent, NewOvertime, OvertimeRecord, RecordedClockEvent, ShiftBreak


class ClockEventRepository(Protocol):
    def get_for_shift(self, shift_id: int, kind: ClockEventKind) -> Optional[ClockEvent]:
        raise NotImplementedError

    def list_for_shifts(self, shift_ids: Sequence[int]) -> Sequence[ClockEvent]:
        raise NotImplementedError

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
        """Atomic conditional write of a clock event and what it produced.

        The event, its Pending anomalies and the optional overtime record are
        written in one transaction: either all of them are stored or none.
        Returns ``None`` when an event of the same kind already exists for the
        shift (unique key violated).
        """

        raise NotImplementedError


class BreakRepository(Protocol):
    def get_by_id(self, break_id: int) -> Optional[ShiftBreak]:
        raise NotImplementedError

    def get_open_for_shift(self, shift_id: int) -> Optional[ShiftBreak]:
        raise NotImplementedError

    def list_for_shift(self, shift_id: int) -> Sequence[ShiftBreak]:
        raise NotImplementedError

    def start(
        self, *, shift_id: int, break_start: datetime, break_type: str, notes: Optional[str] = None
    ) -> Optional[int]:
        """Open a break; ``None`` if the shift already has an open one."""

        raise NotImplementedError

    def finish(self, *, break_id: int, break_end: datetime, duration_minutes: int, is_short_break: bool) -> bool:
        """Close an open break; ``False`` if it was already closed."""

        raise NotImplementedError


class OvertimeRepository(Protocol):
    def get_by_id(self, overtime_id: int) -> Optional[OvertimeRecord]:
        raise NotImplementedError

    def set_type(
        self,
        *,
        overtime_id: int,
        overtime_type: OvertimeType,
        employee_notes: Optional[str],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError
