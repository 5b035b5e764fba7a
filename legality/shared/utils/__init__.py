"""Shared utilities: datetime."""

from legality.shared.utils.datetime import from_timestamp_utc, parse_timestamp, utc_now

__all__ = ["utc_now", "parse_timestamp", "from_timestamp_utc"]
