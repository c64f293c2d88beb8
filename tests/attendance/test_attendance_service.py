from __future__ import annotations

import threading
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from workforce_records.attendance.model import GeoTag
from workforce_records.core.access import Caller
from workforce_records.core.enums import AttendanceStatus, Role, StatusSource
from workforce_records.core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    AuthorizationError,
    InvalidRangeError,
    NotCheckedInError,
    NotFoundError,
    ValidationError,
)


def test_half_day_scenario_then_second_checkin_fails(container, employee):
    svc = container.attendance_service

    rec = svc.check_in(employee, now=datetime(2024, 3, 4, 9, 0))
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.check_out is None

    rec = svc.check_out(employee, now=datetime(2024, 3, 4, 12, 30))
    assert rec.working_hours == Decimal("3.50")
    assert rec.status == AttendanceStatus.HALF_DAY

    with pytest.raises(AlreadyCheckedInError):
        svc.check_in(employee, now=datetime(2024, 3, 4, 13, 0))


def test_full_day_is_present(container, employee, fixed_now):
    svc = container.attendance_service
    svc.check_in(employee, now=fixed_now)

    rec = svc.check_out(employee, now=fixed_now + timedelta(hours=8, minutes=15))

    assert rec.working_hours == Decimal("8.25")
    assert rec.status == AttendanceStatus.PRESENT


def test_checkin_stores_geo_tag(container, employee, fixed_now):
    geo = GeoTag(latitude=10.5, longitude=106.7, address="Head office")

    rec = container.attendance_service.check_in(employee, now=fixed_now, geo=geo)

    assert rec.check_in.geo == geo
    assert rec.check_in_time == fixed_now


def test_checkout_without_checkin_fails(container, employee, fixed_now):
    with pytest.raises(NotCheckedInError):
        container.attendance_service.check_out(employee, now=fixed_now)


def test_second_checkout_fails(container, employee, fixed_now):
    svc = container.attendance_service
    svc.check_in(employee, now=fixed_now)
    svc.check_out(employee, now=fixed_now + timedelta(hours=5))

    with pytest.raises(AlreadyCheckedOutError):
        svc.check_out(employee, now=fixed_now + timedelta(hours=6))


def test_checkin_for_unknown_user_fails(container, fixed_now):
    ghost = Caller(user_id=999, role=Role.EMPLOYEE)
    with pytest.raises(NotFoundError):
        container.attendance_service.check_in(ghost, now=fixed_now)


def test_checkin_on_leave_day_keeps_leave_status(container, employee, fixed_now):
    svc = container.attendance_service
    svc.mark_leave_day(employee.user_id, fixed_now.date())

    rec = svc.check_in(employee, now=fixed_now)
    assert rec.check_in_time == fixed_now
    assert rec.status == AttendanceStatus.LEAVE
    assert rec.status_source == StatusSource.LEAVE

    rec = svc.check_out(employee, now=fixed_now + timedelta(hours=2))
    assert rec.working_hours == Decimal("2.00")
    assert rec.status == AttendanceStatus.LEAVE


def test_admin_status_survives_checkout(container, employee, admin, fixed_now):
    svc = container.attendance_service
    rec = svc.check_in(employee, now=fixed_now)
    svc.admin_set_status(admin, rec.attendance_id, "Absent")

    rec = svc.check_out(employee, now=fixed_now + timedelta(hours=9))

    assert rec.status == AttendanceStatus.ABSENT
    assert rec.status_source == StatusSource.ADMIN


def test_today_without_record_is_absent(container, employee, fixed_now):
    today = container.attendance_service.get_today(employee, now=fixed_now)

    assert today.work_date == fixed_now.date()
    assert today.checked_in is False
    assert today.checked_out is False
    assert today.status == AttendanceStatus.ABSENT
    assert today.record is None
    # nothing is persisted for a synthesized answer
    assert container.attendance_repo.all() == []


def test_today_reflects_punches(container, employee, fixed_now):
    svc = container.attendance_service
    svc.check_in(employee, now=fixed_now)

    today = svc.get_today(employee, now=fixed_now + timedelta(hours=1))

    assert today.checked_in is True
    assert today.checked_out is False
    assert today.status == AttendanceStatus.PRESENT
    assert today.check_in_time == fixed_now


def _seed_days(container, caller, days):
    for d in days:
        now = datetime.combine(d, datetime.min.time()) + timedelta(hours=9)
        container.attendance_service.check_in(caller, now=now)
        container.attendance_service.check_out(caller, now=now + timedelta(hours=8))


def test_list_is_scoped_for_employees(container, employee, other_employee, hr):
    _seed_days(container, employee, [date(2024, 3, 1), date(2024, 3, 2)])
    _seed_days(container, other_employee, [date(2024, 3, 1)])
    svc = container.attendance_service

    own = svc.list(employee, user_id=other_employee.user_id)
    assert {r.user_id for r in own} == {employee.user_id}
    assert [r.work_date for r in own] == [date(2024, 3, 2), date(2024, 3, 1)]

    assert len(svc.list(hr)) == 3
    assert {r.user_id for r in svc.list(hr, user_id=other_employee.user_id)} == {other_employee.user_id}


def test_list_date_bounds_are_inclusive(container, employee):
    _seed_days(container, employee, [date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3)])

    rows = container.attendance_service.list(employee, start="2024-03-02", end="2024-03-03")

    assert [r.work_date for r in rows] == [date(2024, 3, 3), date(2024, 3, 2)]


def test_list_rejects_inverted_range(container, employee):
    with pytest.raises(InvalidRangeError):
        container.attendance_service.list(employee, start="2024-03-05", end="2024-03-01")


def test_get_by_id_other_users_record_is_forbidden(container, employee, other_employee, fixed_now):
    rec = container.attendance_service.check_in(other_employee, now=fixed_now)

    with pytest.raises(AuthorizationError):
        container.attendance_service.get_by_id(employee, rec.attendance_id)


def test_admin_set_status_requires_privilege(container, employee, fixed_now):
    rec = container.attendance_service.check_in(employee, now=fixed_now)

    with pytest.raises(AuthorizationError):
        container.attendance_service.admin_set_status(employee, rec.attendance_id, "Present")


def test_admin_set_status_unknown_record(container, hr):
    with pytest.raises(NotFoundError):
        container.attendance_service.admin_set_status(hr, 12345, "Present")


def test_admin_set_status_rejects_unknown_status(container, hr, employee, fixed_now):
    rec = container.attendance_service.check_in(employee, now=fixed_now)

    with pytest.raises(ValidationError):
        container.attendance_service.admin_set_status(hr, rec.attendance_id, "Sleeping")


def test_mark_leave_day_is_idempotent(container, employee, fixed_now):
    svc = container.attendance_service

    first = svc.mark_leave_day(employee.user_id, fixed_now.date())
    second = svc.mark_leave_day(employee.user_id, fixed_now.date())

    assert first == second
    assert len(container.attendance_repo.all()) == 1


def test_concurrent_checkins_create_one_record(container, employee, fixed_now):
    svc = container.attendance_service
    results: list[str] = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        try:
            svc.check_in(employee, now=fixed_now)
            results.append("ok")
        except AlreadyCheckedInError:
            results.append("dup")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("dup") == 7
    assert len(container.attendance_repo.all()) == 1


def test_threshold_uses_exact_duration(container, employee, fixed_now):
    svc = container.attendance_service
    svc.check_in(employee, now=fixed_now)

    rec = svc.check_out(employee, now=fixed_now + timedelta(hours=3, minutes=59, seconds=59))

    # stored hours round up to the threshold, the status does not
    assert rec.working_hours == Decimal("4.00")
    assert rec.status == AttendanceStatus.HALF_DAY


def test_exactly_threshold_is_present(container, employee, fixed_now):
    svc = container.attendance_service
    svc.check_in(employee, now=fixed_now)

    rec = svc.check_out(employee, now=fixed_now + timedelta(hours=4))

    assert rec.status == AttendanceStatus.PRESENT


def test_list_returns_every_row_without_limit(container, employee):
    svc = container.attendance_service
    first = date(2022, 1, 1)
    for i in range(510):
        svc.mark_leave_day(employee.user_id, first + timedelta(days=i))

    assert len(svc.list(employee)) == 510


def test_list_pages_with_limit_and_offset(container, employee):
    days = [date(2024, 3, d) for d in range(1, 6)]
    for d in days:
        container.attendance_service.mark_leave_day(employee.user_id, d)

    page = container.attendance_service.list(employee, limit="2", offset="1")

    assert [r.work_date for r in page] == [date(2024, 3, 4), date(2024, 3, 3)]


@pytest.mark.parametrize("limit, offset", [("0", None), ("-1", None), ("ten", None), (None, "-5")])
def test_list_rejects_bad_paging(container, employee, limit, offset):
    with pytest.raises(ValidationError):
        container.attendance_service.list(employee, limit=limit, offset=offset)


def _leave_over(container, employee, day):
    req = container.leave_service.create(
        employee,
        leave_type="Sick Leave",
        start_date=day - timedelta(days=1),
        end_date=day + timedelta(days=1),
        reason="Flu",
    )
    return req.request_id


def _assert_leave_day_with_punch(container, employee, fixed_now):
    rows = [r for r in container.attendance_repo.all() if r.work_date == fixed_now.date()]
    assert len(rows) == 1
    assert rows[0].status == AttendanceStatus.LEAVE
    assert rows[0].status_source == StatusSource.LEAVE
    assert rows[0].check_in_time == fixed_now


def test_checkin_racing_leave_approval_keeps_one_leave_record(container, employee, hr, fixed_now):
    request_id = _leave_over(container, employee, fixed_now.date())
    barrier = threading.Barrier(2)
    errors: list[BaseException] = []

    def punch():
        barrier.wait()
        try:
            container.attendance_service.check_in(employee, now=fixed_now)
        except Exception as e:
            errors.append(e)

    def approve():
        barrier.wait()
        try:
            container.leave_service.approve(hr, request_id, now=fixed_now)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=punch), threading.Thread(target=approve)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    _assert_leave_day_with_punch(container, employee, fixed_now)
    assert len(container.attendance_repo.all()) == 3


def test_approval_after_checkin_pins_leave(container, employee, hr, fixed_now):
    request_id = _leave_over(container, employee, fixed_now.date())

    container.attendance_service.check_in(employee, now=fixed_now)
    container.leave_service.approve(hr, request_id, now=fixed_now)

    _assert_leave_day_with_punch(container, employee, fixed_now)


def test_checkin_after_approval_keeps_leave(container, employee, hr, fixed_now):
    request_id = _leave_over(container, employee, fixed_now.date())

    container.leave_service.approve(hr, request_id, now=fixed_now)
    container.attendance_service.check_in(employee, now=fixed_now)

    _assert_leave_day_with_punch(container, employee, fixed_now)
