from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Optional, Union

from ..core.constants import HOURS_QUANTUM
from ..core.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date.

    Longer ISO timestamps are accepted and truncated to their day.
    """
    value = value.strip()
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def day_of(value: DateLike) -> date:
    """Truncate a timestamp to its local calendar day."""
    if isinstance(value, str):
        return parse_iso_date(value)
    if isinstance(value, datetime):
        return value.date()
    return value


def optional_day(value: Optional[DateLike]) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return day_of(value)


def day_window(value: DateLike) -> tuple[datetime, datetime]:
    """Half-open [local midnight, next midnight) window containing `value`."""
    start = datetime.combine(day_of(value), time.min)
    return start, start + timedelta(days=1)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end], both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def date_bounds(start: Optional[date], end: Optional[date]) -> tuple[Optional[date], Optional[date]]:
    """Inclusive day range as half-open bounds: [start midnight, midnight after end)."""
    lower = day_window(start)[0].date() if start is not None else None
    upper = day_window(end)[1].date() if end is not None else None
    return lower, upper


def elapsed_hours(start: datetime, end: datetime) -> Decimal:
    """Exact elapsed hours between two punches, never negative."""
    seconds = Decimal(str((end - start).total_seconds()))
    return max(seconds / Decimal(3600), Decimal(0))


def round_hours(hours: Decimal) -> Decimal:
    return hours.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)
