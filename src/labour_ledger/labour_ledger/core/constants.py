"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_TREND_DAYS = 7
MAX_REPORT_RANGE_DAYS = 366

MAX_DAILY_WAGE = Decimal("100000")
NATIONAL_ID_DIGITS = 12
PHONE_DIGITS = 10
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100

WORKERS_TABLE = "workers"
CATEGORIES_TABLE = "categories"
ATTENDANCE_TABLE = "attendance_records"
