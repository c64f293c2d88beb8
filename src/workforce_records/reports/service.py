from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import DateLike, day_of, now_local, optional_day
from ..core.access import Caller, scoped_user_id
from ..core.constants import DEFAULT_SUMMARY_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidRangeError

_STATUS_KEYS = {
    AttendanceStatus.PRESENT: "present_days",
    AttendanceStatus.HALF_DAY: "half_days",
    AttendanceStatus.LEAVE: "leave_days",
    AttendanceStatus.ABSENT: "absent_days",
}


def format_hours(hours: Decimal) -> str:
    minutes = int((hours * 60).to_integral_value())
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class ReportData:
    start: date
    end: date
    rows: list[dict]
    summary: list[dict]


class AttendanceSummaryService:
    """Per-employee attendance totals over an inclusive date range."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def build_summary(
        self,
        caller: Caller,
        *,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        user_id: Optional[int] = None,
    ) -> ReportData:
        end_date = optional_day(end) or day_of(now_local())
        start_date = optional_day(start) or end_date - timedelta(days=DEFAULT_SUMMARY_DAYS - 1)
        if end_date < start_date:
            raise InvalidRangeError("End date must not be before start date")

        scope = scoped_user_id(caller, user_id)
        records = self._attendance.list_records(user_id=scope, start_date=start_date, end_date=end_date)
        totals = self._attendance.summarize_statuses(user_id=scope, start_date=start_date, end_date=end_date)

        out_rows: list[dict] = []

        for r in records:
            out_rows.append(
                {
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "user_id": r.user_id,
                    "check_in": r.check_in_time.strftime("%H:%M") if r.check_in_time else "-",
                    "check_out": r.check_out_time.strftime("%H:%M") if r.check_out_time else "-",
                    "status": r.status.value,
                    "worked_hours": format_hours(r.working_hours),
                }
            )

        # totals are aggregated by the store over the whole range
        summary_map: dict[int, dict] = {}
        for t in totals:
            s = summary_map.get(t.user_id)
            if not s:
                s = {
                    "user_id": t.user_id,
                    "present_days": 0,
                    "half_days": 0,
                    "leave_days": 0,
                    "absent_days": 0,
                    "total_hours": Decimal("0.00"),
                }
                summary_map[t.user_id] = s
            s[_STATUS_KEYS[t.status]] += t.days
            s["total_hours"] += t.hours

        summary = sorted(summary_map.values(), key=lambda x: (-x["total_hours"], x["user_id"]))
        return ReportData(start=start_date, end=end_date, rows=out_rows, summary=summary)
