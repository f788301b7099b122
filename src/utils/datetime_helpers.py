"""
Standardized Date/Time Handling Utilities

CRITICAL RULES:
- All timestamps produced by the progress engine are UTC-aware
- Naive datetimes coming from storage or callers are interpreted as UTC
- Never mix naive and aware datetimes in arithmetic
"""

from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo


UTC = ZoneInfo("UTC")

# Injected wherever "now" is needed so that callers and tests control time
Clock = Callable[[], datetime]


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC, treating naive values as already UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def hours_since(earlier: datetime, now: datetime) -> float:
    """
    Fractional hours elapsed from `earlier` to `now`

    Negative when `earlier` lies in the future (clock skew between writers).
    """
    return (to_utc(now) - to_utc(earlier)).total_seconds() / 3600
