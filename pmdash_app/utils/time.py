"""
Time helpers for refresh bookkeeping and order book timestamps.
"""

from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_feed_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a feed timestamp into a UTC datetime.

    Feed timestamps arrive as epoch milliseconds, either numeric or as a
    numeric string. Anything else yields None.

    Args:
        value: Raw timestamp from a feed message

    Returns:
        UTC datetime or None if the value is absent or unparsable
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        ts_ms = float(value)
    except (TypeError, ValueError, OverflowError):
        return None

    try:
        return datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def format_timestamp(ts: Optional[datetime]) -> Optional[str]:
    """Format a timestamp as ISO8601, passing None through."""
    return ts.isoformat() if ts is not None else None


def seconds_since(start: datetime, end: Optional[datetime] = None) -> float:
    """Elapsed seconds between two timestamps, defaulting the end to now."""
    if end is None:
        end = utc_now()
    return (end - start).total_seconds()
