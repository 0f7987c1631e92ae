"""
Conversions between aware datetimes and the stored timestamp format.

Timestamps are persisted as ``YYYY-MM-DD HH:MM:SS`` strings normalised to UTC.
"""
from datetime import datetime, timezone

DB_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_db_time(value: datetime) -> str:
    """Format a datetime for storage."""
    return ensure_utc(value).strftime(DB_TIME_FORMAT)


def parse_db_time(value: str) -> datetime:
    """Parse a stored timestamp back into an aware UTC datetime."""
    return datetime.strptime(value, DB_TIME_FORMAT).replace(tzinfo=timezone.utc)
