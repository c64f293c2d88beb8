from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from workforce_records.attendance.model import AttendanceRecord, Punch, StatusTotals
from workforce_records.container import wire_container
from workforce_records.core.access import Caller
from workforce_records.core.enums import RequestStatus, Role, StatusSource
from workforce_records.leaves.model import LeaveRequest
from workforce_records.payroll.model import PayrollRecord
from workforce_records.users.model import User

ADMIN_ID = 1
HR_ID = 2
EMPLOYEE_ID = 3
OTHER_EMPLOYEE_ID = 4


def page(rows, limit, offset):
    end = None if limit is None else offset + limit
    return rows[offset:end]


class FakeUsersRepo:
    def __init__(self, users=()):
        self._users = {u.user_id: u for u in users}

    def get_by_id(self, user_id):
        user = self._users.get(int(user_id))
        return user if user and user.is_active else None


class FakeAttendanceRepo:
    """In-memory attendance table keyed on (user_id, work_date), like the UNIQUE index."""

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self._by_id: dict[int, AttendanceRecord] = {}
        self._by_key: dict[tuple, int] = {}

    def _insert(self, record: AttendanceRecord) -> AttendanceRecord:
        record = replace(record, attendance_id=self._next_id)
        self._next_id += 1
        self._by_id[record.attendance_id] = record
        self._by_key[(record.user_id, record.work_date)] = record.attendance_id
        return record

    def all(self):
        return sorted(self._by_id.values(), key=lambda r: r.attendance_id)

    def get_by_id(self, attendance_id):
        return self._by_id.get(int(attendance_id))

    def get_for_user_and_date(self, user_id, work_date):
        rid = self._by_key.get((int(user_id), work_date))
        return self._by_id.get(rid) if rid else None

    def _matching(self, user_id, start_date, end_date):
        return [
            r
            for r in self._by_id.values()
            if (user_id is None or r.user_id == user_id)
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]

    def list_records(self, *, user_id=None, start_date=None, end_date=None, limit=None, offset=0):
        rows = self._matching(user_id, start_date, end_date)
        rows.sort(key=lambda r: (r.work_date, r.attendance_id), reverse=True)
        return page(rows, limit, offset)

    def summarize_statuses(self, *, user_id=None, start_date=None, end_date=None):
        totals: dict[tuple, list] = {}
        for r in self._matching(user_id, start_date, end_date):
            acc = totals.setdefault((r.user_id, r.status), [0, Decimal("0.00")])
            acc[0] += 1
            acc[1] += r.working_hours
        return [StatusTotals(user_id=k[0], status=k[1], days=v[0], hours=v[1]) for k, v in totals.items()]

    def upsert_check_in(self, *, user_id, work_date, check_in_time, geo, status, clear_override):
        with self._lock:
            current = self.get_for_user_and_date(user_id, work_date)
            punch = Punch(time=check_in_time, geo=geo)
            if current is None:
                self._insert(
                    AttendanceRecord(
                        attendance_id=0,
                        user_id=int(user_id),
                        work_date=work_date,
                        check_in=punch,
                        check_out=None,
                        status=status,
                    )
                )
                return True
            if current.check_in is not None:
                return False

            if current.status_source == StatusSource.DERIVED or clear_override:
                current = replace(current, status=status, status_source=StatusSource.DERIVED)
            self._by_id[current.attendance_id] = replace(current, check_in=punch)
            return True

    def update_check_out(self, *, attendance_id, check_out_time, geo, working_hours, derived_status):
        with self._lock:
            current = self._by_id.get(int(attendance_id))
            if not current or current.check_in is None or current.check_out is not None:
                return False
            status = derived_status if current.status_source == StatusSource.DERIVED else current.status
            self._by_id[current.attendance_id] = replace(
                current,
                check_out=Punch(time=check_out_time, geo=geo),
                working_hours=working_hours,
                status=status,
            )
            return True

    def upsert_status(self, *, user_id, work_date, status, source):
        with self._lock:
            current = self.get_for_user_and_date(user_id, work_date)
            if current is None:
                return self._insert(
                    AttendanceRecord(
                        attendance_id=0,
                        user_id=int(user_id),
                        work_date=work_date,
                        check_in=None,
                        check_out=None,
                        status=status,
                        status_source=source,
                    )
                ).attendance_id
            self._by_id[current.attendance_id] = replace(current, status=status, status_source=source)
            return current.attendance_id

    def set_status(self, *, attendance_id, status, source):
        current = self._by_id.get(int(attendance_id))
        if not current:
            return False
        self._by_id[current.attendance_id] = replace(current, status=status, status_source=source)
        return True


class FakeLeaveRepo:
    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self._items: dict[int, LeaveRequest] = {}

    def create_leave(self, *, user_id, leave_type, start_date, end_date, reason):
        rid = self._next_id
        self._next_id += 1
        self._items[rid] = LeaveRequest(
            request_id=rid,
            user_id=int(user_id),
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=datetime(2024, 2, 20, 9, 0, 0) + timedelta(minutes=rid),
        )
        return rid

    def get_by_id(self, request_id):
        return self._items.get(int(request_id))

    def list_leave_requests(self, *, status=None, leave_type=None, user_id=None, limit=None, offset=0):
        rows = [
            r
            for r in self._items.values()
            if (status is None or r.status == status)
            and (leave_type is None or r.leave_type == leave_type)
            and (user_id is None or r.user_id == user_id)
        ]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return page(rows, limit, offset)

    def decide_leave(self, *, request_id, status, reviewed_by, reviewed_at, comment=None):
        with self._lock:
            req = self._items.get(int(request_id))
            if not req or req.status != RequestStatus.PENDING:
                return False
            self._items[req.request_id] = replace(
                req,
                status=status,
                reviewed_by=reviewed_by,
                reviewed_at=reviewed_at,
                reviewer_comment=comment,
            )
            return True


class FakePayrollRepo:
    """In-memory payroll table keyed on (user_id, month, year)."""

    def __init__(self):
        self._next_id = 1
        self._by_id: dict[int, PayrollRecord] = {}
        self._by_key: dict[tuple, int] = {}

    def upsert_payroll(self, *, user_id, month, year, components, totals, remarks):
        key = (int(user_id), int(month), int(year))
        pid = self._by_key.get(key)
        version = 0
        if pid is None:
            pid = self._next_id
            self._next_id += 1
            self._by_key[key] = pid
        else:
            version = self._by_id[pid].version + 1
        self._by_id[pid] = PayrollRecord(
            payroll_id=pid,
            user_id=key[0],
            month=key[1],
            year=key[2],
            components=components,
            gross_salary=totals.gross_salary,
            net_salary=totals.net_salary,
            remarks=remarks,
            version=version,
        )
        return pid

    def get_by_id(self, payroll_id):
        return self._by_id.get(int(payroll_id))

    def list_payroll(self, *, user_id=None, month=None, year=None, limit=None, offset=0):
        rows = [
            r
            for r in self._by_id.values()
            if (user_id is None or r.user_id == user_id)
            and (month is None or r.month == month)
            and (year is None or r.year == year)
        ]
        rows.sort(key=lambda r: (-r.year, -r.month, r.user_id))
        return page(rows, limit, offset)

    def update_payroll(self, *, payroll_id, components, totals, remarks, expected_version):
        current = self._by_id.get(int(payroll_id))
        if not current or current.version != expected_version:
            return False
        self._by_id[current.payroll_id] = replace(
            current,
            components=components,
            gross_salary=totals.gross_salary,
            net_salary=totals.net_salary,
            remarks=remarks,
            version=current.version + 1,
        )
        return True


def make_users():
    return [
        User(user_id=ADMIN_ID, employee_code="ADM-001", full_name="Admin", role=Role.ADMIN),
        User(user_id=HR_ID, employee_code="HR-001", full_name="HR", role=Role.HR),
        User(user_id=EMPLOYEE_ID, employee_code="EMP-001", full_name="Employee", role=Role.EMPLOYEE),
        User(user_id=OTHER_EMPLOYEE_ID, employee_code="EMP-002", full_name="Other", role=Role.EMPLOYEE),
    ]


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 4, 9, 0, 0)


@pytest.fixture
def admin():
    return Caller(user_id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def hr():
    return Caller(user_id=HR_ID, role=Role.HR)


@pytest.fixture
def employee():
    return Caller(user_id=EMPLOYEE_ID, role=Role.EMPLOYEE)


@pytest.fixture
def other_employee():
    return Caller(user_id=OTHER_EMPLOYEE_ID, role=Role.EMPLOYEE)


@pytest.fixture
def container():
    return wire_container(
        users_repo=FakeUsersRepo(make_users()),
        attendance_repo=FakeAttendanceRepo(),
        leave_repo=FakeLeaveRepo(),
        payroll_repo=FakePayrollRepo(),
        half_day_threshold=Decimal("4"),
    )
