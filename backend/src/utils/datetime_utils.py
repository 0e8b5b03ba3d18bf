"""
Datetime utilities for consistent timezone handling across the application.

All business logic runs in a single clinic timezone, configured as a fixed UTC
offset. Dates and times are stored naive and interpreted in that timezone.
This module also provides the injectable `Clock` used for every "now"-relative
decision (cancellation window, absence sweep, past-booking check).
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone, timedelta, date, time
from typing import Optional, Union

from core.config import CLINIC_UTC_OFFSET_HOURS

logger = logging.getLogger(__name__)

# Clinic timezone constant
CLINIC_TZ = timezone(timedelta(hours=CLINIC_UTC_OFFSET_HOURS))

MINUTES_PER_DAY = 24 * 60


def clinic_now() -> datetime:
    """
    Get current clinic datetime.

    Returns:
        Current datetime with the clinic timezone attached
    """
    return datetime.now(CLINIC_TZ)


def ensure_clinic_tz(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in the clinic timezone.

    Naive datetimes are assumed to already be clinic local time.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=CLINIC_TZ)
    return dt.astimezone(CLINIC_TZ)


def combine_clinic(day: date, at: time) -> datetime:
    """Combine a stored date and time into an aware clinic datetime."""
    return datetime.combine(day, at).replace(tzinfo=CLINIC_TZ)


class Clock(ABC):
    """Source of the current time. Inject a `FixedClock` in tests."""

    @abstractmethod
    def now(self) -> datetime:
        """Current clinic datetime (timezone-aware)."""


class SystemClock(Clock):
    """Wall clock in the clinic timezone."""

    def now(self) -> datetime:
        return clinic_now()


class FixedClock(Clock):
    """Clock frozen at a given instant; tests move it with `set` / `advance`."""

    def __init__(self, current: datetime):
        self._current = ensure_clinic_tz(current)

    def now(self) -> datetime:
        return self._current  # type: ignore[return-value]

    def set(self, current: datetime) -> None:
        self._current = ensure_clinic_tz(current)

    def advance(self, **kwargs: float) -> None:
        self._current = self._current + timedelta(**kwargs)  # type: ignore[operator]


def normalize_time(value: Union[str, time, timedelta]) -> time:
    """
    Canonicalize a time of day to minute precision.

    Accepts "HH:MM", "HH:MM:SS" (seconds are truncated, not rounded),
    `datetime.time` and `timedelta` since midnight (some drivers return TIME
    columns that way).

    Raises:
        ValueError: If the value cannot be interpreted as a time of day
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if isinstance(value, timedelta):
        return (datetime.min + value).time().replace(second=0, microsecond=0)
    if isinstance(value, str):
        parts = value.strip().split(':')
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid time format (expected HH:MM): {value}")
        try:
            hour, minute = int(parts[0]), int(parts[1])
        except ValueError as e:
            raise ValueError(f"Invalid time format (expected HH:MM): {value}") from e
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Time out of range: {value}")
        return time(hour, minute)
    raise ValueError(f"Cannot convert {type(value)} to time")


def format_time(value: Union[str, time, timedelta]) -> str:
    """Format a time of day as canonical "HH:MM"."""
    return normalize_time(value).strftime('%H:%M')


def time_to_minutes(value: Union[str, time, timedelta]) -> int:
    """Minutes since midnight of a (canonicalized) time of day."""
    t = normalize_time(value)
    return t.hour * 60 + t.minute


def minutes_to_time_str(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date_string(date_str: str) -> date:
    """
    Parse a date string in YYYY-MM-DD or YYYY/MM/DD format.

    Automatically normalizes single-digit months/days.

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date string cannot be empty")

    date_str = date_str.strip()

    # Normalize separators and pad single-digit months/days
    if '/' in date_str:
        parts = date_str.split('/')
    elif '-' in date_str:
        parts = date_str.split('-')
    else:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}")

    if len(parts) != 3:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}")

    year = parts[0].zfill(4)
    month = parts[1].zfill(2)
    day = parts[2].zfill(2)

    normalized = f"{year}-{month}-{day}"

    try:
        return datetime.strptime(normalized, '%Y-%m-%d').date()
    except ValueError as e:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}") from e


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Check if two half-open [start, end) intervals overlap."""
    return start1 < end2 and start2 < end1


def day_of_week(day: date) -> int:
    """Weekday number used by stored schedules: 0=Sunday, 1=Monday, ..., 6=Saturday."""
    return day.isoweekday() % 7
