from datetime import datetime
from decimal import Decimal

from workforce_records.attendance.factory import AttendanceStrategyFactory
from workforce_records.attendance.strategies.half_day_strategy import HalfDayStrategy
from workforce_records.attendance.strategies.normal_strategy import NormalStrategy
from workforce_records.attendance.strategies.override_strategy import OverrideStrategy
from workforce_records.core.enums import AttendanceStatus, StatusSource


def test_factory_checkout_below_threshold_is_half_day():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(working_hours=Decimal("3.99"), current_source=StatusSource.DERIVED)

    assert isinstance(strategy, HalfDayStrategy)
    decision = strategy.decide_checkout(working_hours=Decimal("3.99"), current=AttendanceStatus.PRESENT)
    assert decision.status == AttendanceStatus.HALF_DAY


def test_factory_checkout_at_threshold_is_present():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(working_hours=Decimal("4.00"), current_source=StatusSource.DERIVED)

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkout_keeps_leave_and_admin_status():
    factory = AttendanceStrategyFactory()
    for source in (StatusSource.LEAVE, StatusSource.ADMIN):
        strategy = factory.for_checkout(working_hours=Decimal("1"), current_source=source)
        assert isinstance(strategy, OverrideStrategy)
        assert strategy.decide_checkout(working_hours=Decimal("1"), current=AttendanceStatus.LEAVE).status == (
            AttendanceStatus.LEAVE
        )


def test_factory_checkin_on_fresh_day_is_present():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(current_source=None)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_checkin(now=datetime(2024, 3, 4, 9, 0), current=None).status == AttendanceStatus.PRESENT


def test_factory_checkin_on_leave_day_respects_switch():
    assert isinstance(AttendanceStrategyFactory().for_checkin(current_source=StatusSource.LEAVE), OverrideStrategy)

    clearing = AttendanceStrategyFactory(checkin_clears_leave=True)
    assert isinstance(clearing.for_checkin(current_source=StatusSource.LEAVE), NormalStrategy)


def test_factory_custom_threshold():
    factory = AttendanceStrategyFactory(half_day_threshold=Decimal("6"))
    strategy = factory.for_checkout(working_hours=Decimal("5.5"), current_source=StatusSource.DERIVED)

    assert isinstance(strategy, HalfDayStrategy)
