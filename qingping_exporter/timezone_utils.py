"""
Timezone-aware time helpers for the Qingping exporter.

The Qingping API speaks epoch seconds (and epoch milliseconds for the request
timestamp of the history endpoint). Everything inside the exporter works with
timezone-aware UTC datetimes; these helpers convert at the edges.
"""

from datetime import datetime, timezone, timedelta
from typing import Callable, Union


NowFunc = Callable[[], datetime]


def utc_now() -> datetime:
    """Get current UTC time with timezone information."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC.

    Args:
        dt: Datetime object (naive datetimes are assumed to be UTC)

    Returns:
        UTC datetime with timezone info
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def epoch_seconds(dt: datetime) -> int:
    """Whole epoch seconds for a datetime, truncated."""
    return int(to_utc(dt).timestamp())


def epoch_millis(dt: datetime) -> int:
    """Whole epoch milliseconds for a datetime, truncated."""
    return int(to_utc(dt).timestamp() * 1000)


def whole_seconds(value: Union[timedelta, float, int]) -> int:
    """Convert a duration to non-negative whole seconds.

    The sign is dropped and any sub-second part is truncated, so
    ``timedelta(seconds=-5.9)`` becomes ``5``.

    Args:
        value: A timedelta or a number of seconds

    Returns:
        Non-negative integer seconds
    """
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    else:
        seconds = float(value)
    return int(abs(seconds))
