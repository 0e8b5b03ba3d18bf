"""
Shared type definitions for the scheduling backend.

This module contains dataclasses and types that are used across multiple services.
"""

from shared_types.availability import (
    AvailabilitySource,
    DateSet,
    DayHours,
    DoctorProfile,
    ExplicitPerCenterSource,
    ExplicitSchedule,
    ExplicitSlot,
    OverrideSource,
    DateOverride,
    Slot,
    Unavailable,
    WeeklyHours,
    WeeklySource,
    WorkingWindow,
)
from shared_types.principal import Principal

__all__ = [
    "AvailabilitySource",
    "DateSet",
    "DayHours",
    "DoctorProfile",
    "ExplicitPerCenterSource",
    "ExplicitSchedule",
    "ExplicitSlot",
    "OverrideSource",
    "DateOverride",
    "Principal",
    "Slot",
    "Unavailable",
    "WeeklyHours",
    "WeeklySource",
    "WorkingWindow",
]
