# app/utils/time_utils.py
"""
Timestamp helpers. All datetimes are stored as naive UTC and rendered as
millisecond-precision ISO-8601 strings with a trailing Z.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Any

TIMEFRAMES = {
    "1h": timedelta(hours=1),
    "6h": timedelta(hours=6),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "all": None,
}
DEFAULT_TIMEFRAME = "24h"


def utcnow() -> datetime:
    return datetime.utcnow()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or datetime) into naive UTC.
    Returns None when the value is missing or not a timestamp.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        except (ValueError, OverflowError):
            # offset pushes the instant outside datetime range
            return None
    return dt


def to_iso_z(dt: Optional[datetime]) -> Optional[str]:
    """datetime(2025, 3, 15, 8, 24) -> '2025-03-15T08:24:00.000Z'"""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def resolve_timeframe(timeframe: Optional[str]) -> str:
    """Unknown or missing timeframes fall back to the last 24 hours."""
    if timeframe in TIMEFRAMES:
        return timeframe
    return DEFAULT_TIMEFRAME


def timeframe_start(timeframe: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Earliest timestamp included by a timeframe, or None for 'all'."""
    delta = TIMEFRAMES.get(resolve_timeframe(timeframe))
    if delta is None:
        return None
    return (now or utcnow()) - delta
