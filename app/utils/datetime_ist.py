"""
IST Date Handling
Naive input is India Standard Time; everything is stored as UTC
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

IST_OFFSET = timedelta(hours=5, minutes=30)
IST = timezone(IST_OFFSET, name="IST")

_OFFSET_SUFFIX = re.compile(r"(Z|[+-]\d{2}:?\d{2})$", re.IGNORECASE)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def parse_as_ist(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a client supplied date/time and return it in UTC.

    Strings without an explicit offset (or 'Z') are read as IST, so
    '2025-11-25T14:30:00' becomes 2025-11-25T09:00:00Z.

    Args:
        value: ISO string or datetime

    Returns:
        Aware UTC datetime, or None for empty input

    Raises:
        ValueError: If the string is not an ISO date/time
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value if value.tzinfo else value.replace(tzinfo=IST)
        return parsed.astimezone(timezone.utc)

    text = str(value).strip()
    if not _OFFSET_SUFFIX.search(text):
        text = f"{text}+05:30"
    elif text[-1] in "zZ":
        text = f"{text[:-1]}+00:00"

    parsed = datetime.fromisoformat(text)
    return parsed.astimezone(timezone.utc)


def ensure_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Normalise a value read back from the database.

    SQLite hands timestamps back as text; naive values are UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip().replace(" ", "T", 1)
        if text[-1] in "zZ":
            text = f"{text[:-1]}+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_as_ist(value: Union[str, datetime, None]) -> Optional[str]:
    """Render a stored UTC value as IST wall-clock time (YYYY-MM-DDTHH:MM:SS)"""
    utc_value = ensure_datetime(value)
    if utc_value is None:
        return None
    ist_value = utc_value + IST_OFFSET
    return ist_value.strftime("%Y-%m-%dT%H:%M:%S")


def to_utc_iso(value: Union[str, datetime, None]) -> Optional[str]:
    """UTC ISO string with milliseconds and a trailing Z"""
    utc_value = ensure_datetime(value)
    if utc_value is None:
        return None
    return utc_value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_value.microsecond // 1000:03d}Z"


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    next_month = datetime(year + (month // 12), month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return value.replace(year=year, month=month, day=min(value.day, last_day))
