from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.datetime_utils import DateLike, day_of, iter_days, now_local
from ..common.validators import optional_text, require_fields, require_non_empty, to_page
from ..core.access import Caller, require_can_act_on_others, require_owner_or_privileged, scoped_user_id
from ..core.enums import LeaveType, RequestStatus
from ..core.exceptions import (
    AlreadyProcessedError,
    InvalidLeaveTypeError,
    InvalidRangeError,
    MissingCommentError,
    NotFoundError,
    ValidationError,
)
from ..users.repository import UserRepository
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


def parse_leave_type(value) -> LeaveType:
    if isinstance(value, LeaveType):
        return value
    text = str(value or "").strip().lower()
    for leave_type in LeaveType:
        if text in {leave_type.value.lower(), leave_type.name.lower()}:
            return leave_type
    raise InvalidLeaveTypeError(f"Unknown leave type: {value!r}")


def parse_request_status(value) -> RequestStatus:
    if isinstance(value, RequestStatus):
        return value
    text = str(value or "").strip().lower()
    for status in RequestStatus:
        if text == status.value.lower():
            return status
    raise ValidationError(f"Unknown leave status: {value!r}")


class LeaveService:
    """Leave request workflow: Pending -> Approved | Rejected, both terminal.

    Approval backfills the requester's attendance through
    AttendanceService.mark_leave_day, one idempotent upsert per day.
    """

    def __init__(self, requests: LeaveRepository, attendance: AttendanceService, users: UserRepository):
        self._requests = requests
        self._attendance = attendance
        self._users = users

    def _get(self, request_id: int) -> LeaveRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    def create(
        self,
        caller: Caller,
        *,
        leave_type,
        start_date: Optional[DateLike],
        end_date: Optional[DateLike],
        reason: Optional[str],
    ) -> LeaveRequest:
        require_fields(leave_type=leave_type, start_date=start_date, end_date=end_date, reason=reason)

        kind = parse_leave_type(leave_type)
        start = day_of(start_date)
        end = day_of(end_date)
        if end < start:
            raise InvalidRangeError("End date must be on or after start date")

        if not self._users.get_by_id(caller.user_id):
            raise NotFoundError("Employee not found")

        request_id = self._requests.create_leave(
            user_id=caller.user_id,
            leave_type=kind,
            start_date=start,
            end_date=end,
            reason=require_non_empty(reason, "reason"),
        )
        logger.info("leave request %s created by user %s (%s..%s)", request_id, caller.user_id, start, end)
        return self._get(request_id)

    def list(
        self,
        caller: Caller,
        *,
        status=None,
        leave_type=None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        page_limit, page_offset = to_page(limit, offset)
        return self._requests.list_leave_requests(
            status=parse_request_status(status) if status else None,
            leave_type=parse_leave_type(leave_type) if leave_type else None,
            user_id=scoped_user_id(caller, None),
            limit=page_limit,
            offset=page_offset,
        )

    def get_by_id(self, caller: Caller, request_id: int) -> LeaveRequest:
        req = self._get(request_id)
        require_owner_or_privileged(caller, req.user_id)
        return req

    def approve(
        self,
        caller: Caller,
        request_id: int,
        *,
        comment: Optional[str] = None,
        now: datetime | None = None,
    ) -> LeaveRequest:
        require_can_act_on_others(caller)

        req = self._get(request_id)
        if not req.is_pending:
            raise AlreadyProcessedError("Leave request has already been processed")

        decided = self._requests.decide_leave(
            request_id=req.request_id,
            status=RequestStatus.APPROVED,
            reviewed_by=caller.user_id,
            reviewed_at=now or now_local(),
            comment=optional_text(comment),
        )
        if not decided:
            raise AlreadyProcessedError("Leave request has already been processed")

        logger.info("leave request %s approved by %s", req.request_id, caller.user_id)
        self._backfill(req)
        return self._get(req.request_id)

    def reject(
        self,
        caller: Caller,
        request_id: int,
        *,
        comment: Optional[str],
        now: datetime | None = None,
    ) -> LeaveRequest:
        require_can_act_on_others(caller)

        text = optional_text(comment)
        if text is None:
            raise MissingCommentError("Please provide a comment for rejection")

        req = self._get(request_id)
        if not req.is_pending:
            raise AlreadyProcessedError("Leave request has already been processed")

        decided = self._requests.decide_leave(
            request_id=req.request_id,
            status=RequestStatus.REJECTED,
            reviewed_by=caller.user_id,
            reviewed_at=now or now_local(),
            comment=text,
        )
        if not decided:
            raise AlreadyProcessedError("Leave request has already been processed")

        logger.info("leave request %s rejected by %s", req.request_id, caller.user_id)
        return self._get(req.request_id)

    def reapply_backfill(self, caller: Caller, request_id: int) -> int:
        """Repair path: re-run the attendance backfill of an approved request.

        Safe to repeat; returns the number of days written.
        """

        require_can_act_on_others(caller)
        req = self._get(request_id)
        if req.status != RequestStatus.APPROVED:
            raise ValidationError("Only approved leave requests can be backfilled")

        logger.info("re-applying backfill for leave request %s (requested by %s)", req.request_id, caller.user_id)
        return self._backfill(req)

    def _backfill(self, req: LeaveRequest) -> int:
        done = 0
        try:
            for day in iter_days(req.start_date, req.end_date):
                self._attendance.mark_leave_day(req.user_id, day)
                done += 1
        except Exception:
            logger.error(
                "backfill for leave request %s stopped after %d of %d days",
                req.request_id,
                done,
                req.days,
            )
            raise
        return done
