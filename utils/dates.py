from datetime import datetime, timezone, date, time
from typing import Optional, Tuple


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form Mongo hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Start and end (inclusive) of a calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)
