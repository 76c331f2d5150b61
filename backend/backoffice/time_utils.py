from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional


END_OF_DAY = time(23, 59, 0)


def local_now() -> datetime:
    """Server-side 'now' in local wall-clock time (naive)."""
    return datetime.now()


def local_today() -> date:
    return local_now().date()


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string.

    - None / "" -> None
    - raises ValueError on anything else that is not a calendar date
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    return date.fromisoformat(s)


def parse_iso_time(value: Optional[str]) -> Optional[time]:
    """
    Parse an HH:MM or HH:MM:SS string into a naive time-of-day.

    Fractional seconds are dropped; attendance is tracked to the second.
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    return time.fromisoformat(s).replace(microsecond=0)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string as a local naive datetime.

    - None / "" -> None
    - "YYYY-MM-DD" is accepted and means midnight
    - offsets ("Z", "+01:00") are converted to local time and stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Closed interval [day 00:00:00, day 23:59:59] used by daily aggregates."""
    return datetime.combine(day, time.min), datetime.combine(day, time(23, 59, 59))


def week_bounds(week_start: date) -> tuple[date, date]:
    return week_start, week_start + timedelta(days=6)


def to_iso(value) -> Optional[str]:
    """Serialize date / time / datetime for JSON; None passes through."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(microsecond=0).isoformat()
    if isinstance(value, time):
        return value.replace(microsecond=0).isoformat()
    return value.isoformat()
