from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import PayrollComponents, PayrollTotals


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute(self, components: PayrollComponents) -> PayrollTotals:
        raise NotImplementedError
