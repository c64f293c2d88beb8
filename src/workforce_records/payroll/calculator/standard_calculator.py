from __future__ import annotations

from .base import PayrollCalculator
from ..model import ZERO, PayrollComponents, PayrollTotals


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: gross = sum of earnings, net = gross - sum of deductions."""

    def compute(self, components: PayrollComponents) -> PayrollTotals:
        gross = sum(components.earnings, ZERO)
        deductions = sum(components.deductions, ZERO)
        return PayrollTotals(gross_salary=gross, total_deductions=deductions, net_salary=gross - deductions)
