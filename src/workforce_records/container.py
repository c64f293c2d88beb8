from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import HALF_DAY_THRESHOLD_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .reports.service import AttendanceSummaryService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    leave_repo: LeaveRepository
    payroll_repo: PayrollRepository

    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService
    attendance_summary_service: AttendanceSummaryService


def wire_container(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    leave_repo: LeaveRepository,
    payroll_repo: PayrollRepository,
    conn: Optional[DatabaseConnection] = None,
    half_day_threshold=HALF_DAY_THRESHOLD_HOURS,
    checkin_clears_leave: bool = False,
) -> Container:
    """Build the services on top of already constructed repositories."""

    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        strategy_factory=AttendanceStrategyFactory(
            half_day_threshold=Decimal(str(half_day_threshold)),
            checkin_clears_leave=bool(checkin_clears_leave),
        ),
    )
    leave_service = LeaveService(leave_repo, attendance_service, users_repo)
    payroll_service = PayrollService(payroll_repo, users_repo)
    attendance_summary_service = AttendanceSummaryService(attendance_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        payroll_repo=payroll_repo,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
        attendance_summary_service=attendance_summary_service,
    )


def build_container(
    *,
    db_config: dict,
    half_day_threshold=HALF_DAY_THRESHOLD_HOURS,
    checkin_clears_leave: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_repo=MySQLLeaveRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        conn=conn,
        half_day_threshold=half_day_threshold,
        checkin_clears_leave=checkin_clears_leave,
    )
