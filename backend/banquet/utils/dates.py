from datetime import date, datetime, time, timezone
from typing import Any, Optional
import math


def utcnow() -> datetime:
    """Naive UTC now, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a date or datetime (object or ISO string) into naive UTC.

    Plain calendar dates resolve to midnight. Returns None when the value
    cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), time.min)
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def days_until(event_date: date, now: datetime) -> int:
    """Whole days from ``now`` until the start of ``event_date``, rounded up."""
    start = datetime.combine(event_date, time.min)
    return math.ceil((start - now).total_seconds() / 86400)
