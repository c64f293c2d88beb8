from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import require_fields, to_int, to_page
from ..core.access import Caller, require_can_act_on_others, require_owner_or_privileged, scoped_user_id
from ..core.exceptions import NotFoundError, StorageConflictError
from ..users.repository import UserRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayrollComponents, PayrollRecord, parse_month, parse_year
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    """Monthly payroll records.

    Totals are never taken from the caller: every write recomputes gross and net
    from the full set of stored components.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        users: UserRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payroll = payroll
        self._users = users
        self._calculator = calculator or StandardPayrollCalculator()

    def _get(self, payroll_id: int) -> PayrollRecord:
        record = self._payroll.get_by_id(int(payroll_id))
        if not record:
            raise NotFoundError("Payroll record not found")
        return record

    def upsert(
        self,
        caller: Caller,
        *,
        user_id,
        month,
        year,
        amounts: Optional[Mapping[str, Any]] = None,
        remarks: Optional[str] = None,
    ) -> PayrollRecord:
        require_can_act_on_others(caller)
        require_fields(user_id=user_id, month=month, year=year)

        employee_id = to_int(user_id, "user_id")
        if not self._users.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        period_month = parse_month(month)
        period_year = parse_year(year)
        components = PayrollComponents.from_mapping(amounts or {})
        totals = self._calculator.compute(components)

        payroll_id = self._payroll.upsert_payroll(
            user_id=employee_id,
            month=period_month,
            year=period_year,
            components=components,
            totals=totals,
            remarks=(remarks or "").strip(),
        )
        logger.info(
            "payroll %s written for user %s %02d/%d (gross=%s, net=%s)",
            payroll_id,
            employee_id,
            period_month,
            period_year,
            totals.gross_salary,
            totals.net_salary,
        )
        return self._get(payroll_id)

    def update(self, caller: Caller, payroll_id: int, changes: Mapping[str, Any]) -> PayrollRecord:
        require_can_act_on_others(caller)
        record = self._get(payroll_id)

        changes = dict(changes)
        remarks = changes.pop("remarks", None)
        components = record.components.merged(changes)
        totals = self._calculator.compute(components)

        applied = self._payroll.update_payroll(
            payroll_id=record.payroll_id,
            components=components,
            totals=totals,
            remarks=record.remarks if remarks is None else str(remarks).strip(),
            expected_version=record.version,
        )
        if not applied:
            logger.warning("payroll %s changed during update by %s", record.payroll_id, caller.user_id)
            raise StorageConflictError("Payroll record was modified concurrently, retry the update")
        logger.info("payroll %s updated by %s (fields=%s)", record.payroll_id, caller.user_id, sorted(changes))
        return self._get(record.payroll_id)

    def list(
        self,
        caller: Caller,
        *,
        user_id: Optional[int] = None,
        month=None,
        year=None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Sequence[PayrollRecord]:
        page_limit, page_offset = to_page(limit, offset)
        return self._payroll.list_payroll(
            user_id=scoped_user_id(caller, user_id),
            month=parse_month(month) if month not in (None, "") else None,
            year=parse_year(year) if year not in (None, "") else None,
            limit=page_limit,
            offset=page_offset,
        )

    def get_by_id(self, caller: Caller, payroll_id: int) -> PayrollRecord:
        record = self._get(payroll_id)
        require_owner_or_privileged(caller, record.user_id)
        return record
