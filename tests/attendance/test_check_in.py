from __future__ import annotations

from datetime import datetime, time

import pytest

from conftest import SHOP, make_shift
from src.timbrature.timbrature.common.geo import GeoPoint
from src.timbrature.timbrature.core.enums import AnomalyType, AttendanceStatus, ClockEventKind, ValidationStatus
from src.timbrature.timbrature.core.exceptions import ConflictError, NotFoundError, ValidationError


def test_check_in_within_tolerance_raises_no_anomaly(container, repos, shift, employee):
    result = container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 10))

    assert result.has_anomaly is False
    assert result.status == AttendanceStatus.ON_TIME
    assert repos.anomalies.items == {}
    payload = result.to_dict()
    assert payload["success"] is True
    assert "anomalyId" not in payload
    assert payload["message"] == "✓ Entrata 09:10"


def test_check_in_late_opens_pending_anomaly_with_quick_options(container, repos, shift, employee):
    result = container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 20))

    payload = result.to_dict()
    assert payload["hasAnomaly"] is True
    anomaly = repos.anomalies.get_by_id(payload["anomalyId"])
    assert anomaly.anomaly_type == AnomalyType.LATE_CHECK_IN
    assert anomaly.status == ValidationStatus.PENDING
    assert anomaly.deviation_minutes == 20
    assert anomaly.severity == 2
    assert "Traffico" in payload["quickResolutionOptions"]
    assert "20 minuti" in payload["empatheticMessage"]


def test_check_in_early_beyond_tolerance_is_early_anomaly(container, repos, shift, employee):
    result = container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 8, 40))

    assert result.status == AttendanceStatus.EARLY
    anomaly = repos.anomalies.get_by_id(result.anomalies[0].anomaly_id)
    assert anomaly.anomaly_type == AnomalyType.EARLY_CHECK_IN
    assert anomaly.severity == 1


@pytest.mark.parametrize("minute,expect_anomaly", [(15, False), (16, True)])
def test_tolerance_boundary_is_inclusive(container, repos, shift, employee, minute, expect_anomaly):
    result = container.attendance_service.check_in(
        shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, minute)
    )
    assert result.has_anomaly is expect_anomaly


def test_very_late_check_in_needs_merchant_review(container, repos, shift, employee):
    result = container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 45))

    anomaly = repos.anomalies.get_by_id(result.anomalies[0].anomaly_id)
    assert anomaly.severity == 3
    assert anomaly.requires_merchant_review is True


def test_duplicate_check_in_is_conflict(container, repos, shift, employee):
    container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))

    with pytest.raises(ConflictError):
        container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 1))
    assert len(repos.events.list_for_shifts([shift.shift_id])) == 1


def test_concurrent_duplicate_rejected_by_atomic_write(container, repos, shift, employee):
    # Simulate a double-tap that passed the pre-check: the unique write decides.
    original_get = repos.events.get_for_shift
    repos.events.get_for_shift = lambda shift_id, kind: None
    try:
        container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))
        with pytest.raises(ConflictError):
            container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))
    finally:
        repos.events.get_for_shift = original_get
    assert repos.events.get_for_shift(shift.shift_id, ClockEventKind.CHECK_IN) is not None


def test_failed_anomaly_write_leaves_no_check_in(container, repos, shift, employee):
    def broken_add(**kwargs):
        raise RuntimeError("disk full")

    original_add = repos.anomalies.add
    repos.anomalies.add = broken_add
    try:
        with pytest.raises(RuntimeError):
            container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 40))
    finally:
        repos.anomalies.add = original_add

    assert repos.events.get_for_shift(shift.shift_id, ClockEventKind.CHECK_IN) is None
    assert repos.anomalies.list_for_shifts([shift.shift_id]) == []

    # the employee can simply retry
    result = container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 41))
    assert [o.anomaly.anomaly_type for o in result.anomalies] == [AnomalyType.LATE_CHECK_IN]
    assert repos.anomalies.get_by_id(result.anomalies[0].anomaly_id).status == ValidationStatus.PENDING


def test_check_in_on_someone_elses_shift_is_not_found(container, shift, other_employee):
    with pytest.raises(NotFoundError):
        container.attendance_service.check_in(shift.shift_id, actor=other_employee, now=datetime(2025, 3, 10, 9, 0))


def test_check_in_unknown_shift_is_not_found(container, employee):
    with pytest.raises(NotFoundError):
        container.attendance_service.check_in(999, actor=employee, now=datetime(2025, 3, 10, 9, 0))


def test_check_in_without_planned_start_is_validation_error(container, repos, employee):
    repos.shifts.add(make_shift(5, start=None))
    with pytest.raises(ValidationError):
        container.attendance_service.check_in(5, actor=employee, now=datetime(2025, 3, 10, 9, 0))


def test_check_in_far_from_shop_adds_location_mismatch(container, repos, shift, employee):
    far_away = GeoPoint(latitude=45.4, longitude=9.3)

    result = container.attendance_service.check_in(
        shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0), location=far_away
    )

    types = [repos.anomalies.get_by_id(o.anomaly_id).anomaly_type for o in result.anomalies]
    assert types == [AnomalyType.LOCATION_MISMATCH]
    assert result.to_dict()["quickResolutionOptions"] == ["Smart working", "Problema tecnico", "Altro"]


def test_check_in_at_shop_with_custom_geofence_predicate(repos, shift, employee, settings):
    from src.timbrature.timbrature.attendance.service import AttendanceService
    from src.timbrature.timbrature.hours.service import HoursService

    calls = []

    def always_inside(location, merchant_location, radius):
        calls.append(radius)
        return True

    hours = HoursService(repos.shifts, repos.events, repos.breaks, repos.corrections)
    service = AttendanceService(
        repos.shifts,
        repos.directory,
        repos.events,
        repos.breaks,
        repos.overtime,
        hours,
        settings=settings,
        geofence=always_inside,
    )
    result = service.check_in(
        shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0), location=GeoPoint(0.0, 0.0)
    )

    assert result.has_anomaly is False
    assert calls == [150]


def test_late_and_location_mismatch_both_recorded(container, repos, shift, employee):
    result = container.attendance_service.check_in(
        shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 30), location=GeoPoint(41.9, 12.5)
    )

    types = [repos.anomalies.get_by_id(o.anomaly_id).anomaly_type for o in result.anomalies]
    assert types == [AnomalyType.LATE_CHECK_IN, AnomalyType.LOCATION_MISMATCH]
    assert result.to_dict()["anomalyId"] == result.anomalies[0].anomaly_id


def test_check_in_next_steps_suggest_break_for_long_shift(container, shift, employee):
    result = container.attendance_service.check_in(shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0))

    assert result.context == "Giornata 8.0h, pausa prevista 30 min"
    assert result.next_steps == "Pausa consigliata verso le 13:00"


def test_check_in_next_steps_for_short_shift(container, repos, employee):
    repos.shifts.add(make_shift(6, start=time(9, 0), end=time(13, 0), break_minutes=0))
    result = container.attendance_service.check_in(6, actor=employee, now=datetime(2025, 3, 10, 9, 0))

    assert result.next_steps == "Ricorda l'uscita stasera"


def test_merchant_actor_cannot_check_in(container, shift, merchant):
    from src.timbrature.timbrature.core.exceptions import AuthorizationError

    with pytest.raises(AuthorizationError):
        container.attendance_service.check_in(shift.shift_id, actor=merchant, now=datetime(2025, 3, 10, 9, 0))


def test_at_shop_location_is_fine(container, repos, shift, employee):
    result = container.attendance_service.check_in(
        shift.shift_id, actor=employee, now=datetime(2025, 3, 10, 9, 0), location=SHOP
    )
    assert result.has_anomaly is False
