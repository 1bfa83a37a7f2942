"""UTC datetime utilities."""

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: str) -> datetime:
    """Parse an ISO8601 date or datetime string into an aware UTC datetime."""
    if len(value) == 10:
        d = date.fromisoformat(value)
        return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def parse_period_end(value: str) -> datetime:
    """Like parse_datetime, but a bare date means the last instant of that day."""
    if len(value) == 10:
        return parse_datetime(value) + timedelta(days=1) - timedelta(microseconds=1)
    return parse_datetime(value)
