from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.validators import to_page
from ..common.datetime_utils import DateLike, day_of, elapsed_hours, now_local, optional_day, round_hours
from ..core.access import Caller, require_can_act_on_others, require_owner_or_privileged, scoped_user_id
from ..core.enums import AttendanceStatus, StatusSource
from ..core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    InvalidRangeError,
    NotCheckedInError,
    NotFoundError,
    ValidationError,
)
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, GeoTag, TodayStatus
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def parse_status(value) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    for status in AttendanceStatus:
        if str(value or "").strip().lower() in {status.value.lower(), status.name.lower()}:
            return status
    raise ValidationError(f"Unknown attendance status: {value!r}")


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._users = users
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def _require_user(self, user_id: int) -> None:
        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("Employee not found")

    def check_in(self, caller: Caller, *, now: datetime | None = None, geo: GeoTag | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = day_of(now)
        self._require_user(caller.user_id)

        existing = self._attendance.get_for_user_and_date(caller.user_id, today)
        if existing and existing.check_in is not None:
            raise AlreadyCheckedInError("Already checked in today")

        strategy = self._factory.for_checkin(current_source=existing.status_source if existing else None)
        decision = strategy.decide_checkin(now=now, current=existing.status if existing else None)

        applied = self._attendance.upsert_check_in(
            user_id=caller.user_id,
            work_date=today,
            check_in_time=now,
            geo=geo,
            status=decision.status,
            clear_override=self._factory.checkin_clears_leave,
        )
        if not applied:
            # A concurrent check-in for the same day won the upsert.
            raise AlreadyCheckedInError("Already checked in today")

        record = self._attendance.get_for_user_and_date(caller.user_id, today)
        logger.info("user %s checked in for %s (status=%s)", caller.user_id, today, record.status.value)
        return record

    def check_out(self, caller: Caller, *, now: datetime | None = None, geo: GeoTag | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = day_of(now)

        record = self._attendance.get_for_user_and_date(caller.user_id, today)
        if not record or record.check_in is None:
            raise NotCheckedInError("Please check in first")
        if record.check_out is not None:
            raise AlreadyCheckedOutError("Already checked out today")

        check_out_time = now
        if check_out_time < record.check_in.time:
            logger.warning("check-out for user %s precedes check-in, clamping", caller.user_id)
            check_out_time = record.check_in.time

        elapsed = elapsed_hours(record.check_in.time, check_out_time)
        working_hours = round_hours(elapsed)
        # the threshold is checked on the exact duration; only the stored value is rounded
        strategy = self._factory.for_checkout(working_hours=elapsed, current_source=record.status_source)
        decision = strategy.decide_checkout(working_hours=working_hours, current=record.status)

        ok = self._attendance.update_check_out(
            attendance_id=record.attendance_id,
            check_out_time=check_out_time,
            geo=geo,
            working_hours=working_hours,
            derived_status=decision.status,
        )
        if not ok:
            raise AlreadyCheckedOutError("Already checked out today")

        updated = self._attendance.get_by_id(record.attendance_id)
        logger.info(
            "user %s checked out for %s (hours=%s, status=%s)",
            caller.user_id,
            today,
            working_hours,
            updated.status.value,
        )
        return updated

    def get_today(self, caller: Caller, *, now: datetime | None = None) -> TodayStatus:
        today = day_of(now or now_local())
        record = self._attendance.get_for_user_and_date(caller.user_id, today)
        if not record:
            return TodayStatus(work_date=today, checked_in=False, checked_out=False, status=AttendanceStatus.ABSENT)

        return TodayStatus(
            work_date=today,
            checked_in=record.check_in is not None,
            checked_out=record.check_out is not None,
            status=record.status,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            working_hours=record.working_hours,
            record=record,
        )

    def list(
        self,
        caller: Caller,
        *,
        user_id: Optional[int] = None,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        page_limit, page_offset = to_page(limit, offset)
        start_date = optional_day(start)
        end_date = optional_day(end)
        if start_date and end_date and end_date < start_date:
            raise InvalidRangeError("End date must not be before start date")

        return self._attendance.list_records(
            user_id=scoped_user_id(caller, user_id),
            start_date=start_date,
            end_date=end_date,
            limit=page_limit,
            offset=page_offset,
        )

    def get_by_id(self, caller: Caller, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        require_owner_or_privileged(caller, record.user_id)
        return record

    def admin_set_status(self, caller: Caller, attendance_id: int, status) -> AttendanceRecord:
        require_can_act_on_others(caller)
        new_status = parse_status(status)

        if not self._attendance.get_by_id(int(attendance_id)):
            raise NotFoundError("Attendance record not found")
        self._attendance.set_status(attendance_id=int(attendance_id), status=new_status, source=StatusSource.ADMIN)

        logger.info("attendance %s status set to %s by %s", attendance_id, new_status.value, caller.user_id)
        return self._attendance.get_by_id(int(attendance_id))

    def mark_leave_day(self, user_id: int, work_date: date) -> int:
        """Force the (user, day) record to Leave, creating it if needed.

        Idempotent: running it again on a Leave day changes nothing.
        """

        return self._attendance.upsert_status(
            user_id=int(user_id),
            work_date=day_of(work_date),
            status=AttendanceStatus.LEAVE,
            source=StatusSource.LEAVE,
        )
