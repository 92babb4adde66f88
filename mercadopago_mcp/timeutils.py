"""
Time Helpers
============
ISO-8601 formatting and parsing shared by handlers and aggregators.

Mercado Pago returns timestamps such as ``2024-03-01T10:15:00.000-04:00``;
the API accepts the same shape on input.
"""

import calendar
from datetime import datetime, timezone
from typing import Callable


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format a datetime with millisecond precision and a ``Z`` suffix for UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat(timespec="milliseconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 date or datetime string.

    Naive values are treated as UTC.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def months_ago(moment: datetime, months: int) -> datetime:
    """Shift back by calendar months, clamping the day to the target month's end."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))
