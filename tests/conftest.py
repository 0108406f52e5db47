from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time

import pytest

from src.timbrature.timbrature.anomalies.model import Anomaly
from src.timbrature.timbrature.attendance.model import ClockEvent, OvertimeRecord, RecordedClockEvent, ShiftBreak
from src.timbrature.timbrature.common.actor import Actor
from src.timbrature.timbrature.common.geo import GeoPoint
from src.timbrature.timbrature.container import assemble
from src.timbrature.timbrature.core.enums import CorrectionStatus, OvertimeType, ValidationStatus
from src.timbrature.timbrature.core.settings import TimbratureSettings
from src.timbrature.timbrature.corrections.model import ClockCorrection
from src.timbrature.timbrature.employees.model import Employee, Merchant, WorkingHoursLimit
from src.timbrature.timbrature.shifts.model import ScheduledShift

MERCHANT_ID = 1
OTHER_MERCHANT_ID = 2
EMPLOYEE_ID = 10
OTHER_EMPLOYEE_ID = 11
SHOP = GeoPoint(latitude=45.464203, longitude=9.189982)


class FakeShiftRepo:
    def __init__(self):
        self._shifts: dict[int, ScheduledShift] = {}

    def add(self, shift: ScheduledShift) -> ScheduledShift:
        self._shifts[shift.shift_id] = shift
        return shift

    def get_by_id(self, shift_id):
        return self._shifts.get(int(shift_id))

    def get_for_employee_and_date(self, *, employee_id, work_date):
        for s in sorted(self._shifts.values(), key=lambda s: (s.planned_start or time.min)):
            if s.employee_id == int(employee_id) and s.work_date == work_date:
                return s
        return None

    def list_for_employee(self, *, employee_id, start, end):
        return [
            s
            for s in sorted(self._shifts.values(), key=lambda s: s.work_date)
            if s.employee_id == int(employee_id) and start <= s.work_date <= end
        ]

    def list_for_merchant(self, *, merchant_id, work_date):
        return [s for s in self._shifts.values() if s.merchant_id == int(merchant_id) and s.work_date == work_date]


class FakeDirectoryRepo:
    def __init__(self):
        self.employees: dict[int, Employee] = {}
        self.merchants: dict[int, Merchant] = {}
        self.limits: dict[int, WorkingHoursLimit] = {}

    def get_employee(self, employee_id):
        return self.employees.get(int(employee_id))

    def get_merchant(self, merchant_id):
        return self.merchants.get(int(merchant_id))

    def get_active_limit(self, *, employee_id, on):
        return self.limits.get(int(employee_id))


class FakeClockEventRepo:
    """Clock events written together with their anomalies and overtime, all or nothing."""

    def __init__(self, anomalies: "FakeAnomalyRepo", overtime: "FakeOvertimeRepo"):
        self._anomalies = anomalies
        self._overtime = overtime
        self._next_id = 1
        self._events: dict[tuple[int, object], ClockEvent] = {}

    def get_for_shift(self, shift_id, kind):
        return self._events.get((int(shift_id), kind))

    def list_for_shifts(self, shift_ids):
        ids = {int(s) for s in shift_ids}
        return [e for e in self._events.values() if e.shift_id in ids]

    def record(
        self, *, shift_id, kind, event_time, status, location=None, notes=None, anomalies=(), overtime=None
    ):
        key = (int(shift_id), kind)
        if key in self._events:
            return None
        saved_anomalies = dict(self._anomalies.items)
        saved_overtime = dict(self._overtime.records)
        try:
            anomaly_ids = tuple(
                self._anomalies.add(shift_id=shift_id, anomaly=a, created_at=event_time) for a in anomalies
            )
            overtime_id = None
            if overtime is not None:
                overtime_id = self._overtime.add(shift_id=shift_id, overtime=overtime, created_at=event_time)
        except Exception:
            # rollback
            self._anomalies.items = saved_anomalies
            self._overtime.records = saved_overtime
            raise
        event_id = self._next_id
        self._next_id += 1
        self._events[key] = ClockEvent(
            event_id=event_id,
            shift_id=int(shift_id),
            kind=kind,
            event_time=event_time,
            status=status,
            location=location,
            notes=notes,
        )
        return RecordedClockEvent(event_id=event_id, anomaly_ids=anomaly_ids, overtime_id=overtime_id)


class FakeBreakRepo:
    def __init__(self):
        self._next_id = 1
        self._breaks: dict[int, ShiftBreak] = {}

    def get_by_id(self, break_id):
        return self._breaks.get(int(break_id))

    def get_open_for_shift(self, shift_id):
        for b in self._breaks.values():
            if b.shift_id == int(shift_id) and b.is_open:
                return b
        return None

    def list_for_shift(self, shift_id):
        return [b for b in self._breaks.values() if b.shift_id == int(shift_id)]

    def start(self, *, shift_id, break_start, break_type, notes=None):
        if any(b.shift_id == int(shift_id) and b.is_open for b in self._breaks.values()):
            return None
        break_id = self._next_id
        self._next_id += 1
        self._breaks[break_id] = ShiftBreak(
            break_id=break_id, shift_id=int(shift_id), break_start=break_start, break_type=break_type, notes=notes
        )
        return break_id

    def finish(self, *, break_id, break_end, duration_minutes, is_short_break):
        b = self._breaks.get(int(break_id))
        if not b or not b.is_open:
            return False
        self._breaks[b.break_id] = replace(
            b, break_end=break_end, duration_minutes=duration_minutes, is_short_break=is_short_break
        )
        return True


class FakeOvertimeRepo:
    def __init__(self):
        self._next_id = 1
        self.records: dict[int, OvertimeRecord] = {}

    def get_by_id(self, overtime_id):
        return self.records.get(int(overtime_id))

    def add(self, *, shift_id, overtime, created_at):
        overtime_id = self._next_id
        self._next_id += 1
        self.records[overtime_id] = OvertimeRecord(
            overtime_id=overtime_id,
            shift_id=int(shift_id),
            employee_id=int(overtime.employee_id),
            merchant_id=int(overtime.merchant_id),
            work_date=overtime.work_date,
            duration_minutes=int(overtime.duration_minutes),
            overtime_type=OvertimeType.PENDING,
            created_at=created_at,
        )
        return overtime_id

    def set_type(self, *, overtime_id, overtime_type, employee_notes, updated_at):
        r = self.records.get(int(overtime_id))
        if not r:
            return False
        self.records[r.overtime_id] = replace(
            r,
            overtime_type=overtime_type,
            employee_notes=employee_notes if employee_notes is not None else r.employee_notes,
            updated_at=updated_at,
        )
        return True


class FakeAnomalyRepo:
    """In-memory anomalies with the same compare-and-set contract as MySQL.

    ``before_transition`` lets a test slip a concurrent write in between the
    service's read and its conditional update.
    """

    def __init__(self, shifts: FakeShiftRepo):
        self._shifts = shifts
        self._next_id = 1
        self.items: dict[int, Anomaly] = {}
        self.before_transition = None

    def add(self, *, shift_id, anomaly, created_at):
        anomaly_id = self._next_id
        self._next_id += 1
        self.items[anomaly_id] = Anomaly(
            anomaly_id=anomaly_id,
            shift_id=int(shift_id),
            anomaly_type=anomaly.anomaly_type,
            status=ValidationStatus.PENDING,
            created_at=created_at,
            severity=anomaly.severity,
            deviation_minutes=anomaly.deviation_minutes,
            empathetic_message=anomaly.empathetic_message,
            requires_merchant_review=anomaly.requires_merchant_review,
        )
        return anomaly_id

    def get_by_id(self, anomaly_id):
        return self.items.get(int(anomaly_id))

    def list_for_shifts(self, shift_ids):
        ids = {int(s) for s in shift_ids}
        return [a for a in self.items.values() if a.shift_id in ids]

    def list_for_merchant(self, *, merchant_id, statuses):
        statuses = set(statuses)
        out = []
        for a in self.items.values():
            shift = self._shifts.get_by_id(a.shift_id)
            if shift and shift.merchant_id == int(merchant_id) and a.status in statuses:
                out.append(a)
        return out

    def transition(
        self,
        *,
        anomaly_id,
        from_statuses,
        to_status,
        reason=None,
        resolved_by=None,
        resolved_at=None,
        notes=None,
    ):
        if self.before_transition:
            hook, self.before_transition = self.before_transition, None
            hook(int(anomaly_id))
        a = self.items.get(int(anomaly_id))
        if not a or a.status not in set(from_statuses):
            return False
        self.items[a.anomaly_id] = replace(
            a,
            status=to_status,
            resolution_reason=reason if reason is not None else a.resolution_reason,
            resolution_notes=notes if notes is not None else a.resolution_notes,
            resolved_by=resolved_by if resolved_by is not None else a.resolved_by,
            resolved_at=resolved_at if resolved_at is not None else a.resolved_at,
        )
        return True

    def force_status(self, anomaly_id, status, **changes):
        self.items[int(anomaly_id)] = replace(self.items[int(anomaly_id)], status=status, **changes)


class FakeCorrectionRepo:
    def __init__(self):
        self._next_id = 1
        self.items: dict[int, ClockCorrection] = {}

    def create(
        self,
        *,
        shift_id,
        employee_id,
        kind,
        original_time,
        corrected_time,
        reason,
        is_within_window,
        status,
        created_at,
        decided_by=None,
    ):
        correction_id = self._next_id
        self._next_id += 1
        self.items[correction_id] = ClockCorrection(
            correction_id=correction_id,
            shift_id=int(shift_id),
            employee_id=int(employee_id),
            kind=kind,
            original_time=original_time,
            corrected_time=corrected_time,
            status=status,
            created_at=created_at,
            reason=reason,
            is_within_window=is_within_window,
            decided_by=decided_by,
            decided_at=created_at if status != CorrectionStatus.PENDING else None,
        )
        return correction_id

    def get_by_id(self, correction_id):
        return self.items.get(int(correction_id))

    def latest_approved(self, shift_id, kind):
        approved = [
            c
            for c in self.items.values()
            if c.shift_id == int(shift_id) and c.kind == kind and c.status == CorrectionStatus.APPROVED
        ]
        if not approved:
            return None
        return max(approved, key=lambda c: (c.decided_at or c.created_at, c.correction_id))

    def decide(self, *, correction_id, status, decided_by, decided_at):
        c = self.items.get(int(correction_id))
        if not c or c.status != CorrectionStatus.PENDING:
            return False
        self.items[c.correction_id] = replace(c, status=status, decided_by=decided_by, decided_at=decided_at)
        return True


class Repos:
    def __init__(self):
        self.shifts = FakeShiftRepo()
        self.directory = FakeDirectoryRepo()
        self.overtime = FakeOvertimeRepo()
        self.anomalies = FakeAnomalyRepo(self.shifts)
        self.events = FakeClockEventRepo(self.anomalies, self.overtime)
        self.breaks = FakeBreakRepo()
        self.corrections = FakeCorrectionRepo()


def make_shift(
    shift_id: int,
    *,
    work_date: date = date(2025, 3, 10),
    start: time | None = time(9, 0),
    end: time | None = time(17, 0),
    break_minutes: int = 30,
    employee_id: int = EMPLOYEE_ID,
    merchant_id: int = MERCHANT_ID,
) -> ScheduledShift:
    return ScheduledShift(
        shift_id=shift_id,
        merchant_id=merchant_id,
        employee_id=employee_id,
        work_date=work_date,
        planned_start=start,
        planned_end=end,
        planned_break_minutes=break_minutes,
    )


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def settings() -> TimbratureSettings:
    return TimbratureSettings()


@pytest.fixture
def repos() -> Repos:
    r = Repos()
    r.directory.merchants[MERCHANT_ID] = Merchant(
        merchant_id=MERCHANT_ID, business_name="Bar Centrale", location=SHOP, geofence_radius_meters=150
    )
    r.directory.merchants[OTHER_MERCHANT_ID] = Merchant(merchant_id=OTHER_MERCHANT_ID, business_name="Altro")
    r.directory.employees[EMPLOYEE_ID] = Employee(employee_id=EMPLOYEE_ID, merchant_id=MERCHANT_ID, full_name="Giulia Rossi")
    r.directory.employees[OTHER_EMPLOYEE_ID] = Employee(
        employee_id=OTHER_EMPLOYEE_ID, merchant_id=MERCHANT_ID, full_name="Marco Bianchi"
    )
    return r


@pytest.fixture
def shift(repos) -> ScheduledShift:
    return repos.shifts.add(make_shift(1))


@pytest.fixture
def container(repos, settings):
    return assemble(
        shifts_repo=repos.shifts,
        directory_repo=repos.directory,
        clock_events_repo=repos.events,
        breaks_repo=repos.breaks,
        overtime_repo=repos.overtime,
        anomalies_repo=repos.anomalies,
        corrections_repo=repos.corrections,
        settings=settings,
    )


@pytest.fixture
def employee() -> Actor:
    return Actor.employee(EMPLOYEE_ID, MERCHANT_ID)


@pytest.fixture
def other_employee() -> Actor:
    return Actor.employee(OTHER_EMPLOYEE_ID, MERCHANT_ID)


@pytest.fixture
def merchant() -> Actor:
    return Actor.merchant(MERCHANT_ID)


@pytest.fixture
def other_merchant() -> Actor:
    return Actor.merchant(OTHER_MERCHANT_ID)
