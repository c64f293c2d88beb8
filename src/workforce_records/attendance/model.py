from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..core.enums import AttendanceStatus, StatusSource
from ..core.exceptions import ValidationError

# Column sizes of the geo columns in schema.sql
MAX_ADDRESS_LENGTH = 255
COORDINATE_PLACES = 6


def _coordinate(value: Any, name: str, bound: float) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number")
    if not -bound <= number <= bound:
        raise ValidationError(f"{name} must be between -{bound:g} and {bound:g}")
    return round(number, COORDINATE_PLACES)


@dataclass(frozen=True)
class GeoTag:
    """Location reported with a punch."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None

    @classmethod
    def from_input(cls, latitude: Any = None, longitude: Any = None, address: Any = None) -> Optional["GeoTag"]:
        """Build a storable tag from client input; None when nothing was reported.

        Coordinates outside the globe are rejected, long addresses are cut to fit.
        """
        text = str(address).strip()[:MAX_ADDRESS_LENGTH] if address is not None else ""
        geo = cls(
            latitude=_coordinate(latitude, "latitude", 90),
            longitude=_coordinate(longitude, "longitude", 180),
            address=text or None,
        )
        return None if geo.is_empty else geo

    @property
    def is_empty(self) -> bool:
        return self.latitude is None and self.longitude is None and not self.address


@dataclass(frozen=True)
class Punch:
    time: datetime
    geo: Optional[GeoTag] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (user, calendar day)."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in: Optional[Punch]
    check_out: Optional[Punch]
    status: AttendanceStatus
    status_source: StatusSource = StatusSource.DERIVED
    working_hours: Decimal = Decimal("0.00")

    @property
    def check_in_time(self) -> Optional[datetime]:
        return self.check_in.time if self.check_in else None

    @property
    def check_out_time(self) -> Optional[datetime]:
        return self.check_out.time if self.check_out else None


@dataclass(frozen=True)
class TodayStatus:
    """Read-model for the "today" widget; synthesized as Absent when no record exists."""

    work_date: date
    checked_in: bool
    checked_out: bool
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    working_hours: Decimal = Decimal("0.00")
    record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class StatusTotals:
    """Day count and hours of one employee in one status, aggregated by the store."""

    user_id: int
    status: AttendanceStatus
    days: int
    hours: Decimal = Decimal("0.00")
