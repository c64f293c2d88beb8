from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.datetime_utils import date_bounds
from ..core.enums import AttendanceStatus, StatusSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, paging_clause
from .model import AttendanceRecord, GeoTag, Punch, StatusTotals
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, work_date,
    check_in_time, check_in_lat, check_in_lng, check_in_address,
    check_out_time, check_out_lat, check_out_lng, check_out_address,
    status, status_source, working_hours
"""


def _geo_params(geo: Optional[GeoTag]) -> tuple[Any, Any, Any]:
    if geo is None or geo.is_empty:
        return None, None, None
    return geo.latitude, geo.longitude, geo.address


def _punch(r: dict, prefix: str) -> Optional[Punch]:
    t = r.get(f"{prefix}_time")
    if t is None:
        return None
    lat = r.get(f"{prefix}_lat")
    lng = r.get(f"{prefix}_lng")
    geo = GeoTag(
        latitude=float(lat) if lat is not None else None,
        longitude=float(lng) if lng is not None else None,
        address=r.get(f"{prefix}_address"),
    )
    return Punch(time=t, geo=None if geo.is_empty else geo)


def _range_filter(user_id: Optional[int], start_date: Optional[date], end_date: Optional[date]) -> tuple[str, list]:
    clauses = ["1=1"]
    params: list[object] = []

    if user_id is not None:
        clauses.append("user_id=%s")
        params.append(int(user_id))
    lower, upper = date_bounds(start_date, end_date)
    if lower is not None:
        clauses.append("work_date >= %s")
        params.append(lower)
    if upper is not None:
        clauses.append("work_date < %s")
        params.append(upper)

    return " AND ".join(clauses), params


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in=_punch(r, "check_in"),
        check_out=_punch(r, "check_out"),
        status=AttendanceStatus(r["status"]),
        status_source=StatusSource(r["status_source"]),
        working_hours=as_decimal(r.get("working_hours")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_records(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[AttendanceRecord]:
        where, params = _range_filter(user_id, start_date, end_date)
        page, page_params = paging_clause(limit, offset)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, attendance_id DESC{page}
                """,
                tuple(params + page_params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def summarize_statuses(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[StatusTotals]:
        where, params = _range_filter(user_id, start_date, end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, status, COUNT(*) AS days, COALESCE(SUM(working_hours), 0) AS hours
                FROM attendance_records
                WHERE {where}
                GROUP BY user_id, status
                """,
                tuple(params),
            )
            return [
                StatusTotals(
                    user_id=int(r["user_id"]),
                    status=AttendanceStatus(r["status"]),
                    days=int(r["days"]),
                    hours=as_decimal(r["hours"]),
                )
                for r in fetchall(cur)
            ]

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
        lat, lng, address = _geo_params(geo)
        clear = 1 if clear_override else 0

        # Assignments run left to right: status and status_source must read the old row.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    user_id, work_date, check_in_time, check_in_lat, check_in_lng, check_in_address,
                    status, status_source
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,'derived')
                ON DUPLICATE KEY UPDATE
                    status = IF(check_in_time IS NULL AND (status_source='derived' OR %s=1), VALUES(status), status),
                    status_source = IF(check_in_time IS NULL AND %s=1, 'derived', status_source),
                    check_in_lat = IF(check_in_time IS NULL, VALUES(check_in_lat), check_in_lat),
                    check_in_lng = IF(check_in_time IS NULL, VALUES(check_in_lng), check_in_lng),
                    check_in_address = IF(check_in_time IS NULL, VALUES(check_in_address), check_in_address),
                    check_in_time = IF(check_in_time IS NULL, VALUES(check_in_time), check_in_time)
                """,
                (int(user_id), work_date, check_in_time, lat, lng, address, status.value, clear, clear),
            )
            # 1 = inserted, 2 = updated, 0 = duplicate left untouched (already checked in).
            return cur.rowcount > 0

    def update_check_out(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        geo: Optional[GeoTag],
        working_hours: Decimal,
        derived_status: AttendanceStatus,
    ) -> bool:
        lat, lng, address = _geo_params(geo)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_lat=%s, check_out_lng=%s, check_out_address=%s,
                    working_hours=%s,
                    status=IF(status_source='derived', %s, status)
                WHERE attendance_id=%s AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                (check_out_time, lat, lng, address, working_hours, derived_status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert_status(self, *, user_id: int, work_date: date, status: AttendanceStatus, source: StatusSource) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, work_date, status, status_source)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    status=VALUES(status),
                    status_source=VALUES(status_source)
                """,
                (int(user_id), work_date, status.value, source.value),
            )
            return int(cur.lastrowid)

    def set_status(self, *, attendance_id: int, status: AttendanceStatus, source: StatusSource) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, status_source=%s
                WHERE attendance_id=%s
                """,
                (status.value, source.value, int(attendance_id)),
            )
            return cur.rowcount > 0
