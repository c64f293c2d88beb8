from __future__ import annotations

from flask import Flask, request

from ..common.web import api_view, current_caller, json_body, ok
from ..container import Container
from .model import LeaveRequest


def leave_to_dict(r: LeaveRequest) -> dict:
    return {
        "id": r.request_id,
        "userId": r.user_id,
        "leaveType": r.leave_type.value,
        "startDate": r.start_date,
        "endDate": r.end_date,
        "days": r.days,
        "reason": r.reason,
        "status": r.status.value,
        "createdAt": r.created_at,
        "reviewedBy": r.reviewed_by,
        "reviewedAt": r.reviewed_at,
        "reviewerComment": r.reviewer_comment,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leave", methods=["POST"], endpoint="leave_create")
    @api_view
    def create_leave():
        body = json_body()
        req = container.leave_service.create(
            current_caller(),
            leave_type=body.get("leaveType"),
            start_date=body.get("startDate"),
            end_date=body.get("endDate"),
            reason=body.get("reason"),
        )
        return ok(leave_to_dict(req), 201, message="Leave request submitted")

    @app.route("/api/leave", methods=["GET"], endpoint="leave_list")
    @api_view
    def list_leave():
        items = container.leave_service.list(
            current_caller(),
            status=request.args.get("status") or None,
            leave_type=request.args.get("leaveType") or None,
            limit=request.args.get("limit"),
            offset=request.args.get("offset"),
        )
        return ok([leave_to_dict(r) for r in items])

    @app.route("/api/leave/<int:request_id>", methods=["GET"], endpoint="leave_get")
    @api_view
    def get_leave(request_id: int):
        return ok(leave_to_dict(container.leave_service.get_by_id(current_caller(), request_id)))

    @app.route("/api/leave/<int:request_id>/approve", methods=["PUT", "POST"], endpoint="leave_approve")
    @api_view
    def approve_leave(request_id: int):
        caller = current_caller()
        req = container.leave_service.approve(caller, request_id, comment=json_body().get("comment"))
        return ok(leave_to_dict(req), message="Leave request approved")

    @app.route("/api/leave/<int:request_id>/reject", methods=["PUT", "POST"], endpoint="leave_reject")
    @api_view
    def reject_leave(request_id: int):
        caller = current_caller()
        req = container.leave_service.reject(caller, request_id, comment=json_body().get("comment"))
        return ok(leave_to_dict(req), message="Leave request rejected")

    @app.route("/api/leave/<int:request_id>/backfill", methods=["POST"], endpoint="leave_backfill")
    @api_view
    def backfill_leave(request_id: int):
        days = container.leave_service.reapply_backfill(current_caller(), request_id)
        return ok({"requestId": request_id, "daysWritten": days})
