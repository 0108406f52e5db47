from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..attendance.model import ClockEvent, ShiftBreak
from ..attendance.repository import BreakRepository, ClockEventRepository
from ..common.datetime_utils import minutes_between
from ..core.enums import ClockEventKind
from ..corrections.model import effective_time
from ..corrections.repository import CorrectionRepository
from ..shifts.model import ScheduledShift
from ..shifts.repository import ShiftRepository
from .calculator.base import WorkedHoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator


@dataclass(frozen=True)
class ShiftHours:
    shift: ScheduledShift
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    break_minutes: int
    worked_minutes: int

    @property
    def is_open(self) -> bool:
        return self.check_in is not None and self.check_out is None

    @property
    def overtime_minutes(self) -> int:
        """Worked minutes beyond the planned work time (closed shifts only)."""
        if self.check_out is None:
            return 0
        return max(self.worked_minutes - self.shift.planned_work_minutes, 0)


def break_minutes_for(shift: ScheduledShift, breaks: Sequence[ShiftBreak]) -> int:
    """Recorded (completed) breaks when there are any, else the planned break."""

    completed = [b for b in breaks if not b.is_open]
    if completed:
        return sum(int(b.duration_minutes) for b in completed)
    return int(shift.planned_break_minutes or 0)


class HoursService:
    def __init__(
        self,
        shifts: ShiftRepository,
        clock_events: ClockEventRepository,
        breaks: BreakRepository,
        corrections: Optional[CorrectionRepository] = None,
        *,
        calculator: Optional[WorkedHoursCalculator] = None,
    ):
        self._shifts = shifts
        self._events = clock_events
        self._breaks = breaks
        self._corrections = corrections
        self._calculator = calculator or StandardHoursCalculator()

    def effective_time(self, event: ClockEvent) -> datetime:
        if not self._corrections:
            return event.event_time
        return effective_time(event.event_time, self._corrections.latest_approved(event.shift_id, event.kind))

    def worked_minutes(self, *, check_in: datetime, check_out: Optional[datetime], break_minutes: int) -> int:
        return self._calculator.worked_minutes(check_in=check_in, check_out=check_out, break_minutes=break_minutes)

    def shift_hours(
        self,
        shift: ScheduledShift,
        *,
        events: Optional[Sequence[ClockEvent]] = None,
        now: Optional[datetime] = None,
    ) -> ShiftHours:
        """Worked time of one shift.

        An open shift (checked in, not out) counts up to ``now`` net of the
        breaks recorded so far; without ``now`` it counts zero.
        """

        if events is None:
            events = self._events.list_for_shifts([shift.shift_id])
        by_kind = {e.kind: e for e in events if e.shift_id == shift.shift_id}

        check_in_event = by_kind.get(ClockEventKind.CHECK_IN)
        check_out_event = by_kind.get(ClockEventKind.CHECK_OUT)
        if check_in_event is None:
            return ShiftHours(shift=shift, check_in=None, check_out=None, break_minutes=0, worked_minutes=0)

        check_in = self.effective_time(check_in_event)
        breaks = self._breaks.list_for_shift(shift.shift_id)

        if check_out_event is not None:
            check_out = self.effective_time(check_out_event)
            break_minutes = break_minutes_for(shift, breaks)
            worked = self.worked_minutes(check_in=check_in, check_out=check_out, break_minutes=break_minutes)
            return ShiftHours(
                shift=shift, check_in=check_in, check_out=check_out, break_minutes=break_minutes, worked_minutes=worked
            )

        break_minutes = sum(int(b.duration_minutes) for b in breaks if not b.is_open)
        if now is None:
            return ShiftHours(shift=shift, check_in=check_in, check_out=None, break_minutes=break_minutes, worked_minutes=0)
        for b in breaks:
            if b.is_open:
                break_minutes += max(minutes_between(b.break_start, now), 0)
        worked = self.worked_minutes(check_in=check_in, check_out=now, break_minutes=break_minutes)
        return ShiftHours(shift=shift, check_in=check_in, check_out=None, break_minutes=break_minutes, worked_minutes=worked)

    def hours_between(self, *, employee_id: int, start: date, end: date, now: Optional[datetime] = None) -> list[ShiftHours]:
        shifts = list(self._shifts.list_for_employee(employee_id=int(employee_id), start=start, end=end))
        if not shifts:
            return []
        events = self._events.list_for_shifts([s.shift_id for s in shifts])
        return [self.shift_hours(s, events=events, now=now) for s in shifts]

    def totals(self, *, employee_id: int, start: date, end: date, now: Optional[datetime] = None) -> tuple[int, int]:
        """(worked minutes, overtime minutes) over ``start..end`` inclusive."""

        rows = self.hours_between(employee_id=employee_id, start=start, end=end, now=now)
        return sum(r.worked_minutes for r in rows), sum(r.overtime_minutes for r in rows)
