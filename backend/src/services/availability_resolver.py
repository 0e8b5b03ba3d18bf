"""
Resolution of the availability source for a doctor on a date.

A doctor's availability can come from vacations, date overrides, per-center
explicit schedules or generic weekly hours. Exactly one of them applies to a
given (doctor, center, date, visit kind), picked in this order:

1. Vacation date            -> Unavailable
2. Date override            -> OverrideSource (empty windows = blocked)
3. Per-center schedule      -> ExplicitPerCenterSource (clinic visits with a center only)
4. Weekly hours for weekday -> WeeklySource, or Unavailable if not working
"""

import logging
from datetime import date
from typing import Optional

from core.constants import VISIT_KIND_HOME
from core.exceptions import NotFoundError
from repositories.base import ScheduleRepository
from shared_types import (
    AvailabilitySource, DoctorProfile, ExplicitPerCenterSource, OverrideSource,
    Unavailable, WeeklySource,
)
from utils.datetime_utils import day_of_week

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    """Picks the single availability source that governs a date. Read-only."""

    def __init__(self, schedule_repository: ScheduleRepository):
        self.schedules = schedule_repository

    def get_doctor(self, doctor_id: int) -> DoctorProfile:
        """
        Get the doctor profile.

        Raises:
            NotFoundError: If the doctor does not exist or is inactive
        """
        doctor = self.schedules.get_doctor(doctor_id)
        if doctor is None:
            raise NotFoundError(f"Doctor {doctor_id} not found")
        return doctor

    def resolve(
        self,
        doctor_id: int,
        center_id: Optional[int],
        day: date,
        visit_kind: str,
    ) -> AvailabilitySource:
        """
        Resolve the availability source for a doctor on a date.

        Home visits ignore `center_id`.

        Raises:
            NotFoundError: If the doctor does not exist
        """
        doctor = self.get_doctor(doctor_id)

        if day in self.schedules.get_vacation_days(doctor_id):
            return Unavailable(reason="vacation")

        override = self.schedules.get_override(doctor_id, day)
        if override is not None:
            return OverrideSource(windows=override.windows, slot_duration=doctor.slot_duration_minutes)

        weekday = day_of_week(day)

        if center_id is not None and visit_kind != VISIT_KIND_HOME:
            schedule = self.schedules.get_doctor_schedule(doctor_id, center_id, weekday)
            if schedule is not None and schedule.is_available:
                return ExplicitPerCenterSource(center_id=center_id, slots=schedule.slots)

        day_hours = self.schedules.get_weekly_hours(doctor_id).get(weekday)
        if day_hours is None or not day_hours.is_working:
            return Unavailable(reason="not_working")

        return WeeklySource(window=day_hours.to_window(), slot_duration=doctor.slot_duration_minutes)
