"""
Standardized Date/Time Handling Utilities

Centralized functions for the date/time arithmetic the reward engine relies on:
1. All stored timestamps are timezone-aware UTC
2. Calendar days and hours of day are derived in the user's timezone
3. Callers pass "now" explicitly, nothing here reads the clock except now_utc()

CRITICAL RULES:
- Never mix naive and aware datetimes (naive values are treated as UTC)
- Day differences are computed on local midnights, not on elapsed hours
"""

import logging
from datetime import datetime, date, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from spike_tracker.config import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


def resolve_timezone(tz: Optional[Union[str, ZoneInfo]] = None) -> ZoneInfo:
    """
    Resolve an IANA timezone name, or return the default

    Args:
        tz: Timezone name, ZoneInfo, or None

    Returns:
        ZoneInfo object (falls back to DEFAULT_TIMEZONE, then UTC)
    """
    if isinstance(tz, ZoneInfo):
        return tz

    tz_str = tz or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_str)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid timezone '{tz_str}': {e}")
        return UTC


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(UTC)


def ensure_aware(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, leave aware ones untouched"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def to_local(dt: datetime, tz: Optional[Union[str, ZoneInfo]] = None) -> datetime:
    """
    Convert datetime to the given timezone

    Args:
        dt: Datetime to convert (naive values are assumed UTC)
        tz: Target timezone

    Returns:
        Timezone-aware datetime in tz
    """
    return ensure_aware(dt).astimezone(resolve_timezone(tz))


def local_date(dt: datetime, tz: Optional[Union[str, ZoneInfo]] = None) -> date:
    """Calendar date of dt in tz (the instant truncated to local midnight)"""
    return to_local(dt, tz).date()


def local_hour(dt: datetime, tz: Optional[Union[str, ZoneInfo]] = None) -> int:
    """Hour of day (0-23) of dt in tz"""
    return to_local(dt, tz).hour


def calendar_days_between(
    earlier: datetime,
    later: datetime,
    tz: Optional[Union[str, ZoneInfo]] = None
) -> int:
    """
    Whole calendar days between two instants

    Both instants are truncated to their local calendar day first, so
    23:59 -> 00:01 the next morning is 1 day, while 00:01 -> 23:59 on
    the same day is 0.

    Returns:
        Day difference (negative if earlier is actually later)
    """
    return (local_date(later, tz) - local_date(earlier, tz)).days


def elapsed_since(start: datetime, now: datetime) -> timedelta:
    """Elapsed time between two instants (naive values are assumed UTC)"""
    return ensure_aware(now) - ensure_aware(start)


def time_of_day(hour: int) -> str:
    """
    Bucket an hour into morning/afternoon/evening

    Args:
        hour: Hour of day (0-23)

    Returns:
        'morning' before 12, 'afternoon' before 18, else 'evening'
    """
    if hour < 12:
        return "morning"
    if hour < 18:
        return "afternoon"
    return "evening"
