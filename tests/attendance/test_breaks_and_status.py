from __future__ import annotations

from datetime import date, datetime, time

import pytest

from conftest import make_shift
from src.timbrature.timbrature.core.enums import OvertimeType
from src.timbrature.timbrature.core.exceptions import InvalidStateError, NotFoundError, ValidationError


def test_break_requires_active_shift(container, shift, employee):
    with pytest.raises(InvalidStateError):
        container.attendance_service.start_break(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 12, 0))


def test_only_one_open_break(container, shift, employee):
    container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))
    container.attendance_service.start_break(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 12, 0))

    with pytest.raises(InvalidStateError):
        container.attendance_service.start_break(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 12, 5))


def test_second_open_break_rejected_by_atomic_write(container, repos, shift, employee):
    container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))
    # Both requests pass the pre-check: the conditional write decides.
    original_get = repos.breaks.get_open_for_shift
    repos.breaks.get_open_for_shift = lambda shift_id: None
    try:
        first = container.attendance_service.start_break(
            shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 12, 0)
        )
        with pytest.raises(InvalidStateError):
            container.attendance_service.start_break(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 12, 0))
    finally:
        repos.breaks.get_open_for_shift = original_get

    open_breaks = [b for b in repos.breaks.list_for_shift(shift.shift_id) if b.is_open]
    assert [b.break_id for b in open_breaks] == [first.break_id]


def test_end_break_twice_is_invalid_state(container, shift, employee):
    container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))
    b = container.attendance_service.start_break(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 12, 0))
    ended = container.attendance_service.end_break(b.break_id, actor=employee, now=datetime(2025, 3, 10, 12, 40))

    assert ended.duration_minutes == 40
    assert ended.is_short_break is False
    with pytest.raises(InvalidStateError):
        container.attendance_service.end_break(b.break_id, actor=employee, now=datetime(2025, 3, 10, 12, 45))


def test_end_break_of_other_employee_is_not_found(container, shift, employee, other_employee):
    container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))
    b = container.attendance_service.start_break(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 12, 0))

    with pytest.raises(NotFoundError):
        container.attendance_service.end_break(b.break_id, actor=other_employee, now=datetime(2025, 3, 10, 12, 10))


def test_status_without_shift(container, employee, fixed_now):
    status = container.attendance_service.get_current_status(employee.employee_id, now=fixed_now)

    assert status["currentShift"] is None
    assert status["statusMessage"] == "Nessun turno oggi"
    assert status["suggestedAction"] == "Goditi il riposo! 🌟"


def test_status_before_check_in(container, shift, employee, fixed_now):
    status = container.attendance_service.get_current_status(employee.employee_id, now=fixed_now)

    assert status["isCheckedIn"] is False
    assert status["currentShift"]["id"] == shift.shift_id
    assert status["statusMessage"] == "Non hai ancora fatto check-in"


def test_status_at_work_and_on_break(container, shift, employee):
    container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))

    at_work = container.attendance_service.get_current_status(employee.employee_id, now=datetime(2025, 3, 10, 11, 0))
    assert at_work["isCheckedIn"] is True
    assert at_work["isOnBreak"] is False
    assert at_work["totalWorkedHoursToday"] == 2.0
    assert at_work["suggestedAction"] == "Continua così! 💪"

    long_stretch = container.attendance_service.get_current_status(
        employee.employee_id, now=datetime(2025, 3, 10, 13, 30)
    )
    assert long_stretch["suggestedAction"] == "Forse è ora di una pausa?"

    container.attendance_service.start_break(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 13, 30))
    on_break = container.attendance_service.get_current_status(employee.employee_id, now=datetime(2025, 3, 10, 13, 45))
    assert on_break["isOnBreak"] is True
    assert on_break["statusMessage"] == "Sei in pausa"
    assert on_break["totalWorkedHoursToday"] == 4.5


def test_status_after_check_out_and_week_total(container, repos, shift, employee):
    # A closed shift earlier in the same week
    repos.shifts.add(make_shift(2, work_date=date(2025, 3, 10), start=time(6, 0), end=time(8, 0), break_minutes=0))
    container.attendance_service.check_in(2, actor=employee, now=datetime(2025, 3, 10, 6, 0))
    container.attendance_service.check_out(2, actor=employee, now=datetime(2025, 3, 10, 8, 0))

    repos.shifts.add(make_shift(3, work_date=date(2025, 3, 11)))
    container.attendance_service.check_in(3, actor=employee, now=datetime(2025, 3, 11, 9, 0))
    container.attendance_service.check_out(3, actor=employee, now=datetime(2025, 3, 11, 17, 0))

    status = container.attendance_service.get_current_status(employee.employee_id, now=datetime(2025, 3, 11, 18, 0))

    assert status["isCheckedIn"] is False
    assert status["statusMessage"] == "Hai completato il turno"
    assert status["totalWorkedHoursToday"] == 7.5
    assert status["totalWorkedHoursThisWeek"] == 9.5


def test_today_shift(container, shift, employee, fixed_now):
    assert container.attendance_service.get_today_shift(employee.employee_id, now=fixed_now) == shift
    with pytest.raises(NotFoundError):
        container.attendance_service.get_today_shift(employee.employee_id, now=datetime(2025, 3, 12, 9, 0))


def _with_overtime(container, shift, employee):
    container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))
    return container.attendance_service.check_out(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 18, 0))


def test_classify_overtime(container, repos, shift, employee):
    result = _with_overtime(container, shift, employee)

    rec = container.attendance_service.classify_overtime(
        result.overtime_id, "BankedHours", actor=employee, notes="Inventario", now=datetime(2025, 3, 10, 18, 5)
    )

    assert rec.overtime_type == OvertimeType.BANKED_HOURS
    assert rec.employee_notes == "Inventario"


def test_classify_overtime_rejects_pending_and_foreign_records(container, shift, employee, other_employee):
    result = _with_overtime(container, shift, employee)

    with pytest.raises(ValidationError):
        container.attendance_service.classify_overtime(result.overtime_id, "Pending", actor=employee)
    with pytest.raises(NotFoundError):
        container.attendance_service.classify_overtime(result.overtime_id, "Paid", actor=other_employee)
