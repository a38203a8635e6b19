"""Utilities for datetime handling."""

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso(dt: datetime | None) -> str | None:
    """Convert datetime to ISO format string, passing None through."""
    return dt.isoformat() if dt is not None else None


def from_iso(value: str | datetime | None) -> datetime | None:
    """Parse an ISO string (``Z`` suffix allowed); datetimes and None pass through."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
