from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Union

from ...core.enums import AttendanceStatus


class WageCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute_wage(self, daily_wage: Decimal, status: Union[AttendanceStatus, str]) -> Decimal:
        raise NotImplementedError
