from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PayrollComponents, PayrollRecord, PayrollTotals


class PayrollRepository(Protocol):
    def upsert_payroll(
        self,
        *,
        user_id: int,
        month: int,
        year: int,
        components: PayrollComponents,
        totals: PayrollTotals,
        remarks: str,
    ) -> int:
        """Create or fully replace the (user, month, year) record in one atomic upsert.

        Returns payroll_id.
        """

        raise NotImplementedError

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def list_payroll(
        self,
        *,
        user_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[PayrollRecord]:
        """Records ordered by year DESC, month DESC."""

        raise NotImplementedError

    def update_payroll(
        self,
        *,
        payroll_id: int,
        components: PayrollComponents,
        totals: PayrollTotals,
        remarks: str,
        expected_version: int,
    ) -> bool:
        """Apply the change only if the row is still at `expected_version`.

        Returns False when the row is gone or another write got there first.
        """

        raise NotImplementedError
