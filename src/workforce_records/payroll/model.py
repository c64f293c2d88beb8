from __future__ import annotations

import calendar
from dataclasses import dataclass, fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import to_money
from ..core.exceptions import ValidationError

ZERO = Decimal("0.00")

EARNING_FIELDS = (
    "basic_salary",
    "house_rent_allowance",
    "medical_allowance",
    "conveyance_allowance",
    "special_allowance",
)
DEDUCTION_FIELDS = ("provident_fund", "professional_tax", "income_tax")


@dataclass(frozen=True)
class PayrollComponents:
    """The eight stored amounts a payroll record is computed from."""

    basic_salary: Decimal = ZERO
    house_rent_allowance: Decimal = ZERO
    medical_allowance: Decimal = ZERO
    conveyance_allowance: Decimal = ZERO
    special_allowance: Decimal = ZERO
    provident_fund: Decimal = ZERO
    professional_tax: Decimal = ZERO
    income_tax: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PayrollComponents":
        """Build from raw input; missing amounts are 0."""
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ValidationError(f"Unknown payroll field(s): {', '.join(sorted(unknown))}")
        return cls(**{name: to_money(value, name) for name, value in data.items()})

    def merged(self, changes: Mapping[str, Any]) -> "PayrollComponents":
        """Copy with only the given amounts replaced."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ValidationError(f"Unknown payroll field(s): {', '.join(sorted(unknown))}")
        return replace(self, **{name: to_money(value, name) for name, value in changes.items()})

    @property
    def earnings(self) -> tuple[Decimal, ...]:
        return tuple(getattr(self, name) for name in EARNING_FIELDS)

    @property
    def deductions(self) -> tuple[Decimal, ...]:
        return tuple(getattr(self, name) for name in DEDUCTION_FIELDS)


@dataclass(frozen=True)
class PayrollTotals:
    gross_salary: Decimal
    total_deductions: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class PayrollRecord:
    """Domain entity: one payroll record per (user, month, year)."""

    payroll_id: int
    user_id: int
    month: int
    year: int
    components: PayrollComponents
    gross_salary: Decimal
    net_salary: Decimal
    remarks: str = ""
    updated_at: Optional[datetime] = None
    # bumped on every write; updates only apply to the version they were based on
    version: int = 0

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]


def parse_month(value: Any) -> int:
    """Accept 1..12, "3", "March" or "Mar"."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid month: {value!r}")
    if isinstance(value, int):
        month = value
    else:
        text = str(value).strip()
        if text.isdigit():
            month = int(text)
        else:
            lowered = text.lower()
            names = {calendar.month_name[i].lower(): i for i in range(1, 13)}
            names.update({calendar.month_abbr[i].lower(): i for i in range(1, 13)})
            if lowered not in names:
                raise ValidationError(f"Invalid month: {value!r}")
            month = names[lowered]
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {value!r}")
    return month


def parse_year(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid year: {value!r}")
    try:
        year = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid year: {value!r}")
    if not 1900 <= year <= 9999:
        raise ValidationError(f"Invalid year: {value!r}")
    return year
