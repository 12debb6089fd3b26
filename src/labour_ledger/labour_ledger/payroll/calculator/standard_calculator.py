from __future__ import annotations

from decimal import Decimal
from typing import Union

from ...core.enums import AttendanceStatus
from ...core.exceptions import InvalidStatus
from .base import WageCalculator

_HALF = Decimal(2)
_ZERO = Decimal("0")


def coerce_status(status: Union[AttendanceStatus, str]) -> AttendanceStatus:
    try:
        return AttendanceStatus(status)
    except ValueError:
        raise InvalidStatus(f"Invalid attendance status: {status!r}", errors={"status": "Valid status is required"})


class StandardWageCalculator(WageCalculator):
    """Standard rule: full pay when present, half pay for a half day, nothing otherwise."""

    def compute_wage(self, daily_wage: Union[Decimal, float, str], status: Union[AttendanceStatus, str]) -> Decimal:
        status = coerce_status(status)
        if isinstance(daily_wage, float):
            # str() first so 450.1 stays 450.1 instead of its binary expansion.
            daily_wage = str(daily_wage)
        wage = Decimal(daily_wage)
        if status == AttendanceStatus.PRESENT:
            return wage
        if status == AttendanceStatus.HALF_DAY:
            return wage / _HALF
        return _ZERO


_default = StandardWageCalculator()


def compute_wage(daily_wage: Union[Decimal, float, str], status: Union[AttendanceStatus, str]) -> Decimal:
    return _default.compute_wage(daily_wage, status)
