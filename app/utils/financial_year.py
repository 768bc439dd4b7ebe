"""
Financial Year Utilities
Annual memberships run on the Indian financial year: 1 April to 31 March (IST)
"""

from datetime import datetime
from typing import Optional

from app.utils.datetime_ist import IST, ensure_datetime, utc_now


def _ist(date: Optional[datetime]) -> datetime:
    value = ensure_datetime(date) if date is not None else utc_now()
    return value.astimezone(IST)


def get_financial_year_start(date: Optional[datetime] = None) -> datetime:
    """1 April 00:00 IST of the financial year containing `date`"""
    local = _ist(date)
    fy_year = local.year - 1 if local.month < 4 else local.year
    return datetime(fy_year, 4, 1, tzinfo=IST)


def get_financial_year_end(date: Optional[datetime] = None) -> datetime:
    """31 March 23:59:59.999 IST of the financial year containing `date`"""
    local = _ist(date)
    fy_year = local.year if local.month < 4 else local.year + 1
    return datetime(fy_year, 3, 31, 23, 59, 59, 999000, tzinfo=IST)


def get_financial_year_label(date: Optional[datetime] = None) -> str:
    """Label such as '2025-26'"""
    start = get_financial_year_start(date)
    end = get_financial_year_end(date)
    return f"{start.year}-{str(end.year)[-2:]}"


def is_in_current_financial_year(date: datetime, now: Optional[datetime] = None) -> bool:
    value = ensure_datetime(date)
    return get_financial_year_start(now) <= value <= get_financial_year_end(now)


def days_remaining_in_financial_year(now: Optional[datetime] = None) -> int:
    """Whole days (rounded up) until 31 March"""
    current = ensure_datetime(now) if now is not None else utc_now()
    remaining = get_financial_year_end(current) - current
    days = remaining.days
    if remaining.seconds or remaining.microseconds:
        days += 1
    return days
