from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Union
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def coerce_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def parse_year_month(value: Union[str, tuple[int, int]]) -> tuple[int, int]:
    """Parse ``"YYYY-MM"`` (or a ``(year, month)`` pair) into a pair."""
    if isinstance(value, tuple):
        year, month = value
    else:
        try:
            parsed = datetime.strptime(value, "%Y-%m")
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid month {value!r} (expected YYYY-MM)")
        year, month = parsed.year, parsed.month
    if not 1 <= int(month) <= 12:
        raise ValidationError(f"Invalid month {value!r}")
    return int(year), int(month)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each calendar day from start to end, both inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def now_local(tz_name: str) -> datetime:
    """Current time in the tenant's timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(ZoneInfo(tz_name))


def today_local(tz_name: str) -> date:
    return now_local(tz_name).date()
