from src.timbrature.timbrature.attendance.factory import AttendanceStrategyFactory
from src.timbrature.timbrature.attendance.strategies.early_strategy import EarlyStrategy
from src.timbrature.timbrature.attendance.strategies.late_strategy import LateStrategy
from src.timbrature.timbrature.attendance.strategies.on_time_strategy import OnTimeStrategy
from src.timbrature.timbrature.core.enums import AnomalyType, AttendanceStatus
from src.timbrature.timbrature.core.settings import TimbratureSettings


def test_factory_checkin_on_time_within_tolerance():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_checkin(delta_minutes=15, tolerance_minutes=15), OnTimeStrategy)
    assert isinstance(factory.for_checkin(delta_minutes=-15, tolerance_minutes=15), OnTimeStrategy)


def test_factory_checkin_late_after_tolerance():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(delta_minutes=16, tolerance_minutes=15)

    assert isinstance(strategy, LateStrategy)


def test_factory_checkout_early_before_tolerance():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(delta_minutes=-60, tolerance_minutes=15)

    assert isinstance(strategy, EarlyStrategy)


def test_late_strategy_escalates_severity_past_threshold():
    settings = TimbratureSettings()

    mild = LateStrategy().decide_checkin(delta_minutes=30, settings=settings)
    serious = LateStrategy().decide_checkin(delta_minutes=31, settings=settings)

    assert mild.anomaly.severity == 2
    assert mild.anomaly.requires_merchant_review is False
    assert serious.anomaly.severity == 3
    assert serious.anomaly.requires_merchant_review is True


def test_on_time_strategy_has_no_anomaly():
    decision = OnTimeStrategy().decide_checkout(delta_minutes=3, settings=TimbratureSettings())

    assert decision.status == AttendanceStatus.ON_TIME
    assert decision.anomaly is None


def test_early_checkout_anomaly_type():
    decision = EarlyStrategy().decide_checkout(delta_minutes=-45, settings=TimbratureSettings())

    assert decision.status == AttendanceStatus.EARLY
    assert decision.anomaly.anomaly_type == AnomalyType.EARLY_CHECK_OUT
