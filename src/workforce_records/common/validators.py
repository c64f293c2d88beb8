from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.constants import MONEY_QUANTUM
from ..core.exceptions import MissingFieldError, ValidationError


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_fields(**values: Any) -> None:
    """Raise MissingFieldError naming every blank value."""
    missing = [name for name, value in values.items() if is_blank(value)]
    if missing:
        raise MissingFieldError(*missing)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if is_blank(value):
        raise MissingFieldError(field_name)
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    if is_blank(value):
        return None
    return str(value).strip()


def to_money(value: Any, field_name: str) -> Decimal:
    """Coerce an amount to a 2-place Decimal; missing amounts are 0."""
    if is_blank(value):
        return Decimal("0.00")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount.quantize(MONEY_QUANTUM)


def to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def to_page(limit: Any = None, offset: Any = None) -> tuple[Optional[int], int]:
    """Validate an optional paging window. No limit means every matching row."""
    page_limit = None if is_blank(limit) else to_int(limit, "limit")
    page_offset = 0 if is_blank(offset) else to_int(offset, "offset")
    if page_limit is not None and page_limit < 1:
        raise ValidationError("limit must be at least 1")
    if page_offset < 0:
        raise ValidationError("offset cannot be negative")
    return page_limit, page_offset
