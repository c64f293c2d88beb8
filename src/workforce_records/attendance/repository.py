from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, StatusSource
from .model import AttendanceRecord, GeoTag, StatusTotals


class AttendanceRepository(Protocol):
    """Storage contract for attendance records.

    Every create-or-update method is a single atomic upsert on the
    (user_id, work_date) key; implementations must never check-then-insert.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[AttendanceRecord]:
        """Records ordered by work_date DESC; date bounds are inclusive days."""

        raise NotImplementedError

    def summarize_statuses(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[StatusTotals]:
        """One row per (user_id, status) over every matching record, no paging."""

        raise NotImplementedError

    def upsert_check_in(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        geo: Optional[GeoTag],
        status: AttendanceStatus,
        clear_override: bool,
    ) -> bool:
        """Insert today's record or set the check-in on an existing one lacking it.

        `status` is applied when the record is new, derived, or `clear_override` is set;
        otherwise an explicit status is kept. Returns False when a check-in already exists.
        """

        raise NotImplementedError

    def update_check_out(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        geo: Optional[GeoTag],
        working_hours: Decimal,
        derived_status: AttendanceStatus,
    ) -> bool:
        """Set the check-out if none is recorded yet.

        `derived_status` only replaces a DERIVED status. Returns False when the
        record already has a check-out.
        """

        raise NotImplementedError

    def upsert_status(self, *, user_id: int, work_date: date, status: AttendanceStatus, source: StatusSource) -> int:
        """Force the status of the (user, day) record, creating it when missing.

        Punches are left as they are. Returns attendance_id.
        """

        raise NotImplementedError

    def set_status(self, *, attendance_id: int, status: AttendanceStatus, source: StatusSource) -> bool:
        raise NotImplementedError
