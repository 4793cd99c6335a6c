"""
Time utilities.

Snapshot timestamps are ISO-8601 UTC strings with millisecond precision
and a ``Z`` suffix, so browser scripts can parse them directly.
"""

import time
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from marketsnap.config.constants import DISPLAY_TIMEZONE


def get_timestamp_ms() -> int:
    """
    Get current timestamp in milliseconds.

    Returns:
        Current Unix timestamp in milliseconds.
    """
    return time.time_ns() // 1_000_000


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def to_iso(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with milliseconds.

    Example:
        >>> to_iso(datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=UTC))
        '2024-01-01T12:00:00.123Z'
    """
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp, accepting a trailing ``Z``.

    Naive values are taken as UTC.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def format_local(dt: datetime, tz_name: str = DISPLAY_TIMEZONE) -> str:
    """Format a datetime in the display timezone as ``YYYY-MM-DD HH:MM:SS``."""
    return dt.astimezone(ZoneInfo(tz_name)).strftime("%Y-%m-%d %H:%M:%S")


def date_days_ago(now: datetime, days: int) -> str:
    """Calendar date ``days`` before ``now`` as ``YYYY-MM-DD``."""
    return (now - timedelta(days=days)).strftime("%Y-%m-%d")


def age_seconds(timestamp: str, now: datetime | None = None) -> float:
    """Seconds elapsed since an ISO timestamp."""
    now = now or utc_now()
    return (now - parse_iso(timestamp)).total_seconds()
