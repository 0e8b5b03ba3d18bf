"""
Shared types for availability-related functionality.

This module contains shared data classes used across the resolver, slot
generator, conflict checker and booking service so that every availability
source is handled through the same shapes.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

from utils.datetime_utils import format_time, intervals_overlap, time_to_minutes


@dataclass(frozen=True)
class WorkingWindow:
    """
    A start/end range (with optional break) during which a doctor works.

    Times are canonical "HH:MM" strings.
    """
    start: str
    end: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @property
    def has_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    def contains(self, start_minutes: int, end_minutes: int) -> bool:
        """True if [start, end) lies inside the window and does not touch the break."""
        if start_minutes < time_to_minutes(self.start) or end_minutes > time_to_minutes(self.end):
            return False
        if self.has_break:
            break_start = time_to_minutes(self.break_start)  # type: ignore[arg-type]
            break_end = time_to_minutes(self.break_end)  # type: ignore[arg-type]
            if intervals_overlap(start_minutes, end_minutes, break_start, break_end):
                return False
        return True

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "start": self.start,
            "end": self.end,
            "break_start": self.break_start,
            "break_end": self.break_end,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkingWindow":
        """Create a window from stored JSON, canonicalizing every time."""
        start = data.get("start")
        end = data.get("end")
        if not start or not end:
            raise ValueError(f"Working window requires start and end, got {data}")
        break_start = data.get("break_start")
        break_end = data.get("break_end")
        return cls(
            start=format_time(start),
            end=format_time(end),
            break_start=format_time(break_start) if break_start else None,
            break_end=format_time(break_end) if break_end else None,
        )


@dataclass(frozen=True)
class DayHours:
    """One weekday entry of a doctor's weekly hours."""
    start: str
    end: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    is_working: bool = True

    def to_window(self) -> WorkingWindow:
        return WorkingWindow(self.start, self.end, self.break_start, self.break_end)


# Weekday (0=Sunday) -> hours for that day
WeeklyHours = Dict[int, DayHours]


@dataclass(frozen=True)
class ExplicitSlot:
    """A slot listed verbatim in a per-center DoctorSchedule."""
    time: str
    duration: int


@dataclass(frozen=True)
class ExplicitSchedule:
    """Per-center explicit schedule for one weekday."""
    doctor_id: int
    center_id: int
    day_of_week: int
    slot_duration: int
    slots: Tuple[ExplicitSlot, ...]
    is_available: bool = True


@dataclass(frozen=True)
class DateOverride:
    """Explicit availability for a single date. No windows means blocked."""
    doctor_id: int
    date: date
    windows: Tuple[WorkingWindow, ...] = ()
    reason: Optional[str] = None


@dataclass(frozen=True)
class DoctorProfile:
    """Scheduling-relevant fields of a doctor."""
    id: int
    full_name: str
    slot_duration_minutes: int
    home_visits_available: bool
    is_active: bool = True


class DateSet:
    """
    Set of dates built from inclusive (start, end) ranges.

    Vacations are stored as ranges; a single day off is a range with start == end.
    Membership is checked without expanding the ranges.
    """

    def __init__(self, ranges: Optional[List[Tuple[date, date]]] = None):
        self._ranges: List[Tuple[date, date]] = sorted(ranges or [])

    def add(self, start: date, end: Optional[date] = None) -> None:
        self._ranges.append((start, end or start))
        self._ranges.sort()

    def __contains__(self, day: object) -> bool:
        if not isinstance(day, date):
            return False
        return any(start <= day <= end for start, end in self._ranges)

    def __bool__(self) -> bool:
        return bool(self._ranges)

    def __repr__(self) -> str:
        return f"DateSet({self._ranges!r})"


@dataclass
class Slot:
    """
    A candidate bookable slot annotated with its booking state.

    `is_available` is always the negation of `is_booked`.
    """
    time: str  # Format: "HH:MM"
    duration: int
    is_booked: bool = False

    @property
    def is_available(self) -> bool:
        return not self.is_booked

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration

    def to_dict(self) -> Dict[str, Union[str, int, bool]]:
        """Convert to dictionary format."""
        return {
            "time": self.time,
            "duration": self.duration,
            "is_available": self.is_available,
            "is_booked": self.is_booked,
        }


# ===== Availability sources =====
# A doctor's availability for a date comes from exactly one of these variants,
# picked by AvailabilityResolver in precedence order.

@dataclass(frozen=True)
class Unavailable:
    """Doctor is off: vacation, non-working weekday or no hours defined."""
    reason: str
    kind: str = field(default="unavailable", init=False)


@dataclass(frozen=True)
class OverrideSource:
    """Date-specific override; an empty window list blocks the date."""
    windows: Tuple[WorkingWindow, ...]
    slot_duration: int
    kind: str = field(default="override", init=False)


@dataclass(frozen=True)
class ExplicitPerCenterSource:
    """Per-center DoctorSchedule; its slots are used as-is."""
    center_id: int
    slots: Tuple[ExplicitSlot, ...]
    kind: str = field(default="explicit_per_center", init=False)


@dataclass(frozen=True)
class WeeklySource:
    """Generic weekly hours for the weekday."""
    window: WorkingWindow
    slot_duration: int
    kind: str = field(default="weekly", init=False)


AvailabilitySource = Union[Unavailable, OverrideSource, ExplicitPerCenterSource, WeeklySource]
