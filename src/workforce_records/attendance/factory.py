from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.constants import HALF_DAY_THRESHOLD_HOURS
from ..core.enums import StatusSource
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.override_strategy import OverrideStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    half_day_threshold: Decimal = HALF_DAY_THRESHOLD_HOURS
    checkin_clears_leave: bool = False

    def for_checkin(self, *, current_source: Optional[StatusSource]) -> AttendanceStrategy:
        if current_source is not None and current_source.is_override and not self.checkin_clears_leave:
            return OverrideStrategy()
        return NormalStrategy()

    def for_checkout(self, *, working_hours: Decimal, current_source: StatusSource) -> AttendanceStrategy:
        if current_source.is_override:
            return OverrideStrategy()
        if working_hours < self.half_day_threshold:
            return HalfDayStrategy()
        return NormalStrategy()
