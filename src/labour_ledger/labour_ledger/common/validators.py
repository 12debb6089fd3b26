from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from ..core import constants
from ..core.exceptions import ValidationError

_WHITESPACE = re.compile(r"\s")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required", errors={field_name: f"{field_name} is required"})
    return value.strip()


def check_name(value: Optional[str], field_name: str = "Name") -> Optional[str]:
    """Return an error message for an invalid person name, None when valid."""
    if not value or not value.strip():
        return f"{field_name} is required"
    if len(value.strip()) < constants.NAME_MIN_LENGTH:
        return f"{field_name} must be at least {constants.NAME_MIN_LENGTH} characters"
    if len(value) > constants.NAME_MAX_LENGTH:
        return f"{field_name} must be less than {constants.NAME_MAX_LENGTH} characters"
    return None


def normalize_phone(value: str) -> str:
    return _WHITESPACE.sub("", value or "")


def normalize_national_id(value: str) -> str:
    return _WHITESPACE.sub("", value or "")


def check_national_id(value: Optional[str]) -> Optional[str]:
    if not value:
        return "National id is required"
    digits = normalize_national_id(value)
    if not digits.isdigit() or len(digits) != constants.NATIONAL_ID_DIGITS:
        return f"National id must be {constants.NATIONAL_ID_DIGITS} digits"
    return None


def check_phone(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    digits = _WHITESPACE.sub("", value)
    if not digits.isdigit() or len(digits) != constants.PHONE_DIGITS:
        return f"Phone must be {constants.PHONE_DIGITS} digits"
    return None


def parse_wage(value: Union[Decimal, int, str, None]) -> Decimal:
    """Parse a daily wage into a Decimal with at most two decimal places."""
    if value is None or value == "":
        raise ValidationError("Daily wage is required", errors={"daily_wage": "Daily wage is required"})
    if isinstance(value, float):
        # Go through str() so 450.1 stays 450.1 instead of its binary expansion.
        value = str(value)
    try:
        wage = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("Daily wage must be a valid number", errors={"daily_wage": "Daily wage must be a valid number"})
    if not wage.is_finite():
        raise ValidationError("Daily wage must be a valid number", errors={"daily_wage": "Daily wage must be a valid number"})
    return wage


def check_wage(wage: Decimal) -> Optional[str]:
    if wage <= 0:
        return "Daily wage must be greater than 0"
    if wage > constants.MAX_DAILY_WAGE:
        return "Daily wage seems too high"
    if wage.as_tuple().exponent < -2:
        return "Daily wage must not have more than 2 decimal places"
    return None


def check_not_future(value: date, today: date, field_name: str = "Date") -> Optional[str]:
    if value > today:
        return f"{field_name} cannot be in the future"
    return None


def require_date_range(start: date, end: date, *, max_days: int = constants.MAX_REPORT_RANGE_DAYS) -> None:
    if start > end:
        raise ValidationError("Start date must be before or equal to end date")
    if (end - start).days > max_days:
        raise ValidationError(f"Date range cannot be more than {max_days} days")
