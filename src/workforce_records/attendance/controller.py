from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..common.datetime_utils import optional_day
from ..common.validators import to_int
from ..common.web import api_view, current_caller, json_body, jsonable, ok
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceRecord, GeoTag, Punch, TodayStatus


def _geo_from(body: dict) -> GeoTag | None:
    loc = body.get("location")
    if not isinstance(loc, dict):
        return None
    return GeoTag.from_input(loc.get("latitude"), loc.get("longitude"), loc.get("address"))


def _punch_dict(p: Punch | None) -> dict | None:
    if p is None:
        return None
    out: dict = {"time": p.time}
    if p.geo:
        out["location"] = {"latitude": p.geo.latitude, "longitude": p.geo.longitude, "address": p.geo.address}
    return out


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "id": r.attendance_id,
        "userId": r.user_id,
        "date": r.work_date,
        "checkIn": _punch_dict(r.check_in),
        "checkOut": _punch_dict(r.check_out),
        "status": r.status.value,
        "statusSource": r.status_source.value,
        "workingHours": r.working_hours,
    }


def today_to_dict(t: TodayStatus) -> dict:
    return {
        "date": t.work_date,
        "checkedIn": t.checked_in,
        "checkedOut": t.checked_out,
        "checkInTime": t.check_in_time,
        "checkOutTime": t.check_out_time,
        "status": t.status.value,
        "workingHours": t.working_hours,
    }


def register(app: Flask, container: Container) -> None:
    def _user_filter():
        raw = request.args.get("userId")
        return to_int(raw, "userId") if raw else None

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @api_view
    def checkin():
        record = container.attendance_service.check_in(current_caller(), geo=_geo_from(json_body()))
        return ok(record_to_dict(record), message="Checked in successfully")

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @api_view
    def checkout():
        record = container.attendance_service.check_out(current_caller(), geo=_geo_from(json_body()))
        return ok(record_to_dict(record), message="Checked out successfully")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @api_view
    def today():
        return ok(today_to_dict(container.attendance_service.get_today(current_caller())))

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @api_view
    def list_attendance():
        records = container.attendance_service.list(
            current_caller(),
            user_id=_user_filter(),
            start=optional_day(request.args.get("startDate")),
            end=optional_day(request.args.get("endDate")),
            limit=request.args.get("limit"),
            offset=request.args.get("offset"),
        )
        return ok([record_to_dict(r) for r in records])

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @api_view
    def get_attendance(attendance_id: int):
        return ok(record_to_dict(container.attendance_service.get_by_id(current_caller(), attendance_id)))

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_set_status")
    @api_view
    def set_status(attendance_id: int):
        caller = current_caller()
        status = json_body().get("status")
        if not status:
            raise ValidationError("status is required")
        record = container.attendance_service.admin_set_status(caller, attendance_id, status)
        return ok(record_to_dict(record))

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @api_view
    def summary():
        data = container.attendance_summary_service.build_summary(
            current_caller(),
            start=request.args.get("startDate") or None,
            end=request.args.get("endDate") or None,
            user_id=_user_filter(),
        )
        return ok({"start": data.start, "end": data.end, "rows": data.rows, "summary": data.summary})

    @app.route("/api/attendance/summary.csv", methods=["GET"], endpoint="attendance_summary_csv")
    @api_view
    def summary_csv():
        data = container.attendance_summary_service.build_summary(
            current_caller(),
            start=request.args.get("startDate") or None,
            end=request.args.get("endDate") or None,
            user_id=_user_filter(),
        )

        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=["work_date", "user_id", "check_in", "check_out", "status", "worked_hours"],
        )
        writer.writeheader()
        for row in data.rows:
            writer.writerow(jsonable(row))

        filename = f"attendance_{data.start.strftime('%Y%m%d')}_{data.end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
