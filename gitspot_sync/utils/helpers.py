"""General utility functions and helper classes."""

from datetime import datetime, timezone


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return a timezone-aware UTC datetime.

    SQLite drops timezone information on round trips, so naive values are
    assumed to already be expressed in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def clamp(value: int, lower: int, upper: int) -> int:
    """Clamp an integer into the inclusive range [lower, upper]."""
    return min(max(value, lower), upper)
