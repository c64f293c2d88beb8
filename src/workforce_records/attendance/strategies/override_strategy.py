from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class OverrideStrategy(AttendanceStrategy):
    """Status was set explicitly (leave approval or admin); punches never change it."""

    def decide_checkin(self, *, now: datetime, current: AttendanceStatus | None) -> StatusDecision:
        return StatusDecision(status=current or AttendanceStatus.PRESENT)

    def decide_checkout(self, *, working_hours: Decimal, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
