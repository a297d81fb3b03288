"""Date manipulation utilities"""

import calendar
from datetime import date, datetime


def add_months(original: date, months: int) -> date:
    """
    Add calendar months, clamping the day to the end of the target month.

    Example:
        2025-01-31 + 1 month → 2025-02-28
        2024-02-29 + 12 months → 2025-02-28
    """
    month = original.month - 1 + months
    year = original.year + month // 12
    month = month % 12 + 1
    day = min(original.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def as_date(value: date | datetime) -> date:
    """Truncate a datetime to its calendar date (dates pass through)"""
    if isinstance(value, datetime):
        return value.date()
    return value
