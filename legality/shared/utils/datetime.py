"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the portal should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a store timestamp (ISO 8601, as PostgREST returns timestamptz) to UTC.

    - If None or empty, returns None
    - If naive, assumes UTC and attaches timezone
    - A trailing 'Z' is accepted

    Args:
        value: ISO string, datetime, or None

    Returns:
        UTC-aware datetime or None
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def from_timestamp_utc(timestamp: float) -> datetime:
    """
    Create a UTC-aware datetime from a Unix timestamp (e.g. a token's expires_at).

    Args:
        timestamp: Unix timestamp (seconds since epoch)

    Returns:
        UTC-aware datetime
    """
    return datetime.fromtimestamp(timestamp, tz=UTC)
