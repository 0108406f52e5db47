from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..anomalies.model import NewAnomaly
from ..common.actor import Actor
from ..common.datetime_utils import hours, minutes_between, now_local, week_start
from ..common.geo import GeofencePredicate, GeoPoint, is_within_geofence
from ..common.validators import optional_text, parse_enum
from ..core.constants import LONG_STRETCH_WITHOUT_BREAK_MINUTES, SHORT_BREAK_MINUTES
from ..core.enums import AnomalyType, AttendanceStatus, ClockEventKind, OvertimeType
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..core.settings import TimbratureSettings
from ..employees.repository import DirectoryRepository
from ..hours.service import HoursService, break_minutes_for
from ..shifts.model import ScheduledShift
from ..shifts.repository import ShiftRepository
from . import messages
from .factory import AttendanceStrategyFactory
from .model import NewOvertime, OvertimeRecord, RecordedClockEvent, ShiftBreak
from .repository import BreakRepository, ClockEventRepository, OvertimeRepository
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenedAnomaly:
    anomaly_id: int
    anomaly: NewAnomaly


@dataclass(frozen=True)
class CheckInResult:
    event_id: int
    status: AttendanceStatus
    message: str
    context: str
    next_steps: str
    anomalies: list[OpenedAnomaly] = field(default_factory=list)

    @property
    def has_anomaly(self) -> bool:
        return bool(self.anomalies)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": True,
            "hasAnomaly": self.has_anomaly,
            "status": self.status.value,
            "message": self.message,
            "context": self.context,
            "nextSteps": self.next_steps,
        }
        payload.update(_anomaly_payload(self.anomalies))
        return payload


@dataclass(frozen=True)
class CheckOutResult:
    event_id: int
    status: AttendanceStatus
    worked_minutes: int
    planned_minutes: int
    overtime_minutes: int
    has_overtime: bool
    message: str
    context: str
    next_steps: str
    overtime_id: Optional[int] = None
    anomalies: list[OpenedAnomaly] = field(default_factory=list)

    @property
    def has_anomaly(self) -> bool:
        return bool(self.anomalies)

    @property
    def worked_hours(self) -> float:
        return hours(self.worked_minutes)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": True,
            "hasAnomaly": self.has_anomaly,
            "hasOvertime": self.has_overtime,
            "status": self.status.value,
            "workedHours": self.worked_hours,
            "overtimeMinutes": self.overtime_minutes,
            "message": self.message,
            "context": self.context,
            "nextSteps": self.next_steps,
        }
        if self.overtime_id is not None:
            payload["overtimeId"] = self.overtime_id
        payload.update(_anomaly_payload(self.anomalies))
        return payload


def _anomaly_payload(opened: list[OpenedAnomaly]) -> dict[str, Any]:
    if not opened:
        return {}
    primary = opened[0]
    return {
        "anomalyId": primary.anomaly_id,
        "anomalyIds": [o.anomaly_id for o in opened],
        "anomalyType": primary.anomaly.anomaly_type.value,
        "empatheticMessage": primary.anomaly.empathetic_message,
        "quickResolutionOptions": messages.quick_options(primary.anomaly.anomaly_type),
    }


def shift_payload(shift: ScheduledShift) -> dict[str, Any]:
    return {
        "id": shift.shift_id,
        "employeeId": shift.employee_id,
        "merchantId": shift.merchant_id,
        "date": shift.work_date.strftime("%Y-%m-%d"),
        "plannedStart": shift.planned_start.strftime("%H:%M") if shift.planned_start else None,
        "plannedEnd": shift.planned_end.strftime("%H:%M") if shift.planned_end else None,
        "plannedBreakMinutes": int(shift.planned_break_minutes or 0),
    }


def break_payload(b: ShiftBreak) -> dict[str, Any]:
    return {
        "id": b.break_id,
        "shiftId": b.shift_id,
        "start": b.break_start.isoformat(),
        "end": b.break_end.isoformat() if b.break_end else None,
        "durationMinutes": b.duration_minutes,
        "breakType": b.break_type,
        "isShortBreak": b.is_short_break,
    }


def overtime_payload(rec: OvertimeRecord) -> dict[str, Any]:
    return {
        "id": rec.overtime_id,
        "shiftId": rec.shift_id,
        "date": rec.work_date.strftime("%Y-%m-%d"),
        "durationMinutes": rec.duration_minutes,
        "overtimeType": rec.overtime_type.value,
        "employeeNotes": rec.employee_notes,
    }


class AttendanceService:
    """Check-in/check-out recording and classification against the planned shift."""

    def __init__(
        self,
        shifts: ShiftRepository,
        directory: DirectoryRepository,
        clock_events: ClockEventRepository,
        breaks: BreakRepository,
        overtime: OvertimeRepository,
        hours_service: HoursService,
        *,
        settings: TimbratureSettings | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        geofence: GeofencePredicate | None = None,
    ):
        self._shifts = shifts
        self._directory = directory
        self._events = clock_events
        self._breaks = breaks
        self._overtime = overtime
        self._hours = hours_service
        self._settings = settings or TimbratureSettings()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._geofence = geofence or is_within_geofence

    def _owned_shift(self, shift_id: int, employee_id: int) -> ScheduledShift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift or shift.employee_id != int(employee_id):
            raise NotFoundError("Turno non trovato")
        return shift

    def _opened_anomalies(
        self, shift: ScheduledShift, pending: list[NewAnomaly], recorded: RecordedClockEvent
    ) -> list[OpenedAnomaly]:
        opened: list[OpenedAnomaly] = []
        for anomaly_id, anomaly in zip(recorded.anomaly_ids, pending):
            logger.info(
                "Anomaly %s opened: %s on shift %s (deviation=%s)",
                anomaly_id,
                anomaly.anomaly_type.value,
                shift.shift_id,
                anomaly.deviation_minutes,
            )
            opened.append(OpenedAnomaly(anomaly_id=anomaly_id, anomaly=anomaly))
        return opened

    def _location_anomaly(self, shift: ScheduledShift, location: Optional[GeoPoint]) -> Optional[NewAnomaly]:
        if location is None:
            return None
        merchant = self._directory.get_merchant(shift.merchant_id)
        if not merchant or merchant.location is None:
            return None
        radius = merchant.geofence_radius_meters or self._settings.geofence_radius_meters
        if self._geofence(location, merchant.location, radius):
            return None
        return NewAnomaly(
            anomaly_type=AnomalyType.LOCATION_MISMATCH,
            severity=2,
            deviation_minutes=None,
            empathetic_message=messages.location_mismatch(),
        )

    def check_in(
        self,
        shift_id: int,
        *,
        actor: Actor,
        now: datetime | None = None,
        location: GeoPoint | None = None,
    ) -> CheckInResult:
        now = now or now_local()
        employee_id = actor.require_employee()
        shift = self._owned_shift(shift_id, employee_id)

        planned_start = shift.planned_start_at
        if planned_start is None:
            raise ValidationError("Il turno non ha un orario di inizio pianificato")
        if self._events.get_for_shift(shift.shift_id, ClockEventKind.CHECK_IN):
            raise ConflictError("Check-in già registrato per questo turno")

        delta = minutes_between(planned_start, now)
        strategy = self._factory.for_checkin(delta_minutes=delta, tolerance_minutes=self._settings.tolerance_minutes)
        decision = strategy.decide_checkin(delta_minutes=delta, settings=self._settings)

        pending: list[NewAnomaly] = []
        if decision.anomaly:
            pending.append(decision.anomaly)
        mismatch = self._location_anomaly(shift, location)
        if mismatch:
            pending.append(mismatch)

        recorded = self._events.record(
            shift_id=shift.shift_id,
            kind=ClockEventKind.CHECK_IN,
            event_time=now,
            status=decision.status,
            location=location,
            anomalies=pending,
        )
        if recorded is None:
            logger.warning("Concurrent duplicate check-in rejected for shift %s", shift.shift_id)
            raise ConflictError("Check-in già registrato per questo turno")
        logger.info("Check-in recorded for shift %s by employee %s (delta=%s min)", shift.shift_id, employee_id, delta)
        opened = self._opened_anomalies(shift, pending, recorded)

        return CheckInResult(
            event_id=recorded.event_id,
            status=decision.status,
            message=messages.check_in_message(now),
            context=messages.check_in_context(shift),
            next_steps=messages.check_in_next_steps(shift),
            anomalies=opened,
        )

    def check_out(
        self,
        shift_id: int,
        *,
        actor: Actor,
        now: datetime | None = None,
        location: GeoPoint | None = None,
    ) -> CheckOutResult:
        now = now or now_local()
        employee_id = actor.require_employee()
        shift = self._owned_shift(shift_id, employee_id)

        check_in_event = self._events.get_for_shift(shift.shift_id, ClockEventKind.CHECK_IN)
        if check_in_event is None:
            raise NotFoundError(
                "Nessun check-in registrato per questo turno",
                classification=AnomalyType.MISSING_CHECK_IN.value,
            )
        if self._events.get_for_shift(shift.shift_id, ClockEventKind.CHECK_OUT):
            raise ConflictError("Check-out già registrato per questo turno")

        open_break = self._breaks.get_open_for_shift(shift.shift_id)
        if open_break:
            self._close_break(open_break, now)
            logger.info("Open break %s closed by check-out on shift %s", open_break.break_id, shift.shift_id)

        breaks = list(self._breaks.list_for_shift(shift.shift_id))
        break_minutes = break_minutes_for(shift, breaks)
        check_in_time = self._hours.effective_time(check_in_event)
        worked = self._hours.worked_minutes(check_in=check_in_time, check_out=now, break_minutes=break_minutes)

        planned_end = shift.planned_end_at
        planned = shift.planned_work_minutes
        overtime = max(worked - planned, 0) if planned_end is not None else 0
        has_overtime = overtime > self._settings.overtime_threshold_minutes

        if planned_end is not None:
            delta = minutes_between(planned_end, now)
            strategy = self._factory.for_checkout(delta_minutes=delta, tolerance_minutes=self._settings.tolerance_minutes)
            decision = strategy.decide_checkout(delta_minutes=delta, settings=self._settings)
        else:
            delta = 0
            decision = StatusDecision(status=AttendanceStatus.ON_TIME)

        pending: list[NewAnomaly] = []
        if decision.anomaly:
            pending.append(decision.anomaly)
        extended = self._extended_break_anomaly(shift, breaks)
        if extended:
            pending.append(extended)
        new_overtime = None
        if has_overtime:
            new_overtime = NewOvertime(
                employee_id=employee_id,
                merchant_id=shift.merchant_id,
                work_date=shift.work_date,
                duration_minutes=overtime,
            )

        recorded = self._events.record(
            shift_id=shift.shift_id,
            kind=ClockEventKind.CHECK_OUT,
            event_time=now,
            status=decision.status,
            location=location,
            anomalies=pending,
            overtime=new_overtime,
        )
        if recorded is None:
            logger.warning("Concurrent duplicate check-out rejected for shift %s", shift.shift_id)
            raise ConflictError("Check-out già registrato per questo turno")
        logger.info(
            "Check-out recorded for shift %s by employee %s (worked=%s min, delta=%s min)",
            shift.shift_id,
            employee_id,
            worked,
            delta,
        )
        opened = self._opened_anomalies(shift, pending, recorded)
        overtime_id = recorded.overtime_id
        if overtime_id is not None:
            logger.info("Overtime %s recorded: %s min on shift %s", overtime_id, overtime, shift.shift_id)

        return CheckOutResult(
            event_id=recorded.event_id,
            status=decision.status,
            worked_minutes=worked,
            planned_minutes=planned,
            overtime_minutes=overtime,
            has_overtime=has_overtime,
            message=messages.check_out_message(now),
            context=messages.check_out_context(hours(worked), hours(planned)),
            next_steps=messages.overtime_prompt(overtime) if has_overtime else messages.GOOD_REST,
            overtime_id=overtime_id,
            anomalies=opened,
        )

    def _extended_break_anomaly(self, shift: ScheduledShift, breaks: list[ShiftBreak]) -> Optional[NewAnomaly]:
        completed = [b for b in breaks if not b.is_open]
        if not completed:
            return None
        excess = sum(int(b.duration_minutes) for b in completed) - int(shift.planned_break_minutes or 0)
        if excess <= self._settings.tolerance_minutes:
            return None
        return NewAnomaly(
            anomaly_type=AnomalyType.EXTENDED_BREAK,
            severity=2,
            deviation_minutes=excess,
            empathetic_message=messages.extended_break(excess),
        )

    # -------- Breaks --------
    def start_break(
        self,
        shift_id: int,
        *,
        actor: Actor,
        now: datetime | None = None,
        break_type: str = "General",
        notes: str | None = None,
    ) -> ShiftBreak:
        now = now or now_local()
        employee_id = actor.require_employee()
        shift = self._owned_shift(shift_id, employee_id)

        if not self._events.get_for_shift(shift.shift_id, ClockEventKind.CHECK_IN):
            raise InvalidStateError("Devi fare check-in prima di iniziare una pausa")
        if self._events.get_for_shift(shift.shift_id, ClockEventKind.CHECK_OUT):
            raise InvalidStateError("Il turno è già concluso")
        if self._breaks.get_open_for_shift(shift.shift_id):
            raise InvalidStateError("C'è già una pausa in corso")

        break_id = self._breaks.start(
            shift_id=shift.shift_id,
            break_start=now,
            break_type=(break_type or "").strip() or "General",
            notes=optional_text(notes),
        )
        if break_id is None:
            logger.warning("Concurrent second break rejected for shift %s", shift.shift_id)
            raise InvalidStateError("C'è già una pausa in corso")
        logger.info("Break %s started on shift %s", break_id, shift.shift_id)
        started = self._breaks.get_by_id(break_id)
        if not started:
            raise NotFoundError("Pausa non trovata")
        return started

    def end_break(self, break_id: int, *, actor: Actor, now: datetime | None = None) -> ShiftBreak:
        now = now or now_local()
        employee_id = actor.require_employee()

        current = self._breaks.get_by_id(int(break_id))
        if not current:
            raise NotFoundError("Pausa non trovata")
        self._owned_shift(current.shift_id, employee_id)
        if not current.is_open:
            raise InvalidStateError("La pausa è già terminata")

        self._close_break(current, now)
        ended = self._breaks.get_by_id(current.break_id)
        if not ended:
            raise NotFoundError("Pausa non trovata")
        return ended

    def _close_break(self, current: ShiftBreak, now: datetime) -> None:
        duration = max(minutes_between(current.break_start, now), 0)
        ok = self._breaks.finish(
            break_id=current.break_id,
            break_end=now,
            duration_minutes=duration,
            is_short_break=duration < SHORT_BREAK_MINUTES,
        )
        if not ok:
            raise InvalidStateError("La pausa è già terminata")
        logger.info("Break %s ended after %s min", current.break_id, duration)

    # -------- Queries --------
    def get_today_shift(self, employee_id: int, *, now: datetime | None = None) -> ScheduledShift:
        now = now or now_local()
        shift = self._shifts.get_for_employee_and_date(employee_id=int(employee_id), work_date=now.date())
        if not shift:
            raise NotFoundError(messages.NO_SHIFT_TODAY)
        return shift

    def get_current_status(self, employee_id: int, *, now: datetime | None = None) -> dict[str, Any]:
        now = now or now_local()
        today: date = now.date()
        week_minutes, _ = self._hours.totals(employee_id=employee_id, start=week_start(today), end=today, now=now)

        shift = self._shifts.get_for_employee_and_date(employee_id=int(employee_id), work_date=today)
        if not shift:
            return {
                "isCheckedIn": False,
                "isOnBreak": False,
                "currentShift": None,
                "totalWorkedHoursToday": 0.0,
                "totalWorkedHoursThisWeek": hours(week_minutes),
                "statusMessage": messages.NO_SHIFT_TODAY,
                "suggestedAction": messages.ENJOY_REST,
            }

        sh = self._hours.shift_hours(shift, now=now)
        open_break = self._breaks.get_open_for_shift(shift.shift_id) if sh.is_open else None

        if sh.check_in is None:
            status_message, suggested = messages.NOT_CHECKED_IN, messages.REMEMBER_CHECK_IN
        elif sh.check_out is not None:
            status_message, suggested = messages.SHIFT_COMPLETED, messages.GOOD_REST
        elif open_break:
            status_message, suggested = messages.ON_BREAK, messages.ENJOY_BREAK
        else:
            status_message = messages.AT_WORK
            since = self._last_resume(shift, sh.check_in)
            if minutes_between(since, now) > LONG_STRETCH_WITHOUT_BREAK_MINUTES:
                suggested = messages.TIME_FOR_BREAK
            else:
                suggested = messages.KEEP_GOING

        return {
            "isCheckedIn": sh.is_open,
            "isOnBreak": open_break is not None,
            "currentShift": shift_payload(shift),
            "totalWorkedHoursToday": hours(sh.worked_minutes),
            "totalWorkedHoursThisWeek": hours(week_minutes),
            "statusMessage": status_message,
            "suggestedAction": suggested,
        }

    def _last_resume(self, shift: ScheduledShift, check_in: datetime) -> datetime:
        ends = [b.break_end for b in self._breaks.list_for_shift(shift.shift_id) if b.break_end is not None]
        return max([check_in, *ends])

    # -------- Overtime --------
    def classify_overtime(
        self,
        overtime_id: int,
        overtime_type: Any,
        *,
        actor: Actor,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> OvertimeRecord:
        now = now or now_local()
        employee_id = actor.require_employee()

        rec = self._overtime.get_by_id(int(overtime_id))
        if not rec or rec.employee_id != employee_id:
            raise NotFoundError("Straordinario non trovato")

        chosen = parse_enum(OvertimeType, overtime_type, "Tipo straordinario")
        if chosen == OvertimeType.PENDING:
            raise ValidationError("Scegli come gestire lo straordinario")

        self._overtime.set_type(
            overtime_id=rec.overtime_id,
            overtime_type=chosen,
            employee_notes=optional_text(notes),
            updated_at=now,
        )
        logger.info("Overtime %s classified as %s", rec.overtime_id, chosen.value)
        updated = self._overtime.get_by_id(rec.overtime_id)
        if not updated:
            raise NotFoundError("Straordinario non trovato")
        return updated
