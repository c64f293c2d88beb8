from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role supplied by the identity provider."""

    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the database."""

    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half-day"
    LEAVE = "Leave"


class StatusSource(str, Enum):
    """Where the current attendance status came from.

    DERIVED statuses are recomputed from punches; LEAVE and ADMIN are explicit
    overrides that derivation must not touch.
    """

    DERIVED = "derived"
    LEAVE = "leave"
    ADMIN = "admin"

    @property
    def is_override(self) -> bool:
        return self is not StatusSource.DERIVED


class RequestStatus(str, Enum):
    """Leave approval workflow states."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveType(str, Enum):
    PAID_TIME_OFF = "Paid Time off"
    SICK_LEAVE = "Sick Leave"
    UNPAID = "Unpaid Leaves"
