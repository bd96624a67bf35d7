from datetime import UTC, datetime


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC timezone if naive, return as-is if already aware."""
    return dt if dt.tzinfo else dt.replace(tzinfo=UTC)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds between two datetimes, truncated toward zero."""
    return int((ensure_utc(end) - ensure_utc(start)).total_seconds())
