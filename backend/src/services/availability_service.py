"""
Availability service for shared scheduling and availability logic.

This module contains the availability queries used by the booking flow and the
API: the annotated slot list of a date, the bookability check of a single
requested slot, and the list of dates that still have free slots.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional

from core.constants import MAX_AVAILABLE_DATES_RANGE_DAYS, VISIT_KIND_HOME, VISIT_KINDS
from core.exceptions import (
    DOCTOR_NOT_AT_CENTER, HOME_VISITS_UNAVAILABLE, NotFoundError, PolicyViolation,
    ValidationError,
)
from repositories.base import AppointmentRepository, ScheduleRepository
from services.availability_resolver import AvailabilityResolver
from services.conflict_checker import ConflictChecker
from services.slot_generator import SlotGenerator
from shared_types import (
    AvailabilitySource, DoctorProfile, ExplicitPerCenterSource, OverrideSource, Slot,
    WeeklySource, WorkingWindow,
)
from utils.datetime_utils import format_time, time_to_minutes

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Service class for availability operations.

    All operations are read-only and deterministic for a fixed repository state.
    """

    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        appointment_repository: AppointmentRepository,
    ):
        self.schedules = schedule_repository
        self.resolver = AvailabilityResolver(schedule_repository)
        self.conflicts = ConflictChecker(appointment_repository)

    def get_available_slots(
        self,
        doctor_id: int,
        center_id: Optional[int],
        day: date,
        visit_kind: str,
    ) -> List[Slot]:
        """
        Get every candidate slot of a doctor on a date, annotated with booking state.

        Booked slots are returned too (with `is_booked=True`) so callers can
        render the full day.

        Args:
            doctor_id: Doctor ID
            center_id: Center of a clinic visit; ignored for home visits
            day: Date to check
            visit_kind: "clinic" or "home"

        Returns:
            Slots sorted by start time

        Raises:
            ValidationError: Unknown visit kind
            NotFoundError: Unknown doctor or center
            PolicyViolation: Home visits not offered, or doctor not at the center
        """
        self.validate_request(doctor_id, center_id, visit_kind)
        source = self.resolver.resolve(doctor_id, center_id, day, visit_kind)
        candidates = self._candidate_slots(source)
        return self.conflicts.annotate(doctor_id, day, candidates)

    def is_slot_bookable(
        self,
        doctor_id: int,
        center_id: Optional[int],
        day: date,
        time: str,
        duration: int,
        visit_kind: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> bool:
        """
        Check whether a requested slot can be booked.

        The start time must be a slot of the governing source. For generated
        sources (weekly hours, overrides) the whole [time, time + duration)
        interval must also fit inside a working window without touching the
        break; for explicit per-center slots it must not run past the listed
        slot's duration. The interval must not intersect any live appointment of the
        doctor, other than `exclude_appointment_id`.

        Raises:
            Same as `get_available_slots`.
        """
        self.validate_request(doctor_id, center_id, visit_kind)
        source = self.resolver.resolve(doctor_id, center_id, day, visit_kind)

        start = time_to_minutes(time)
        end = start + duration
        requested = format_time(time)

        candidates = {slot.time: slot for slot in self._candidate_slots(source)}
        if requested not in candidates:
            logger.debug(f"{requested} is not a slot of doctor {doctor_id} on {day} ({source.kind})")
            return False

        if isinstance(source, ExplicitPerCenterSource) and duration > candidates[requested].duration:
            logger.debug(
                f"{requested}+{duration}min exceeds the {candidates[requested].duration}min slot "
                f"of doctor {doctor_id} on {day}"
            )
            return False

        windows = self._windows(source)
        if windows and not any(window.contains(start, end) for window in windows):
            logger.debug(f"{requested}+{duration}min does not fit the working hours of doctor {doctor_id} on {day}")
            return False

        return not self.conflicts.has_conflict(doctor_id, day, start, end, exclude_appointment_id)

    def get_available_dates(
        self,
        doctor_id: int,
        center_id: Optional[int],
        start_date: date,
        end_date: date,
        visit_kind: str,
    ) -> List[date]:
        """
        Get the dates in [start_date, end_date] that have at least one free slot.

        Raises:
            ValidationError: Invalid range or range longer than MAX_AVAILABLE_DATES_RANGE_DAYS
            Same as `get_available_slots` otherwise.
        """
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")
        if (end_date - start_date).days + 1 > MAX_AVAILABLE_DATES_RANGE_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_AVAILABLE_DATES_RANGE_DAYS} days")

        self.validate_request(doctor_id, center_id, visit_kind)

        available_dates: List[date] = []
        current = start_date
        while current <= end_date:
            source = self.resolver.resolve(doctor_id, center_id, current, visit_kind)
            slots = self.conflicts.annotate(doctor_id, current, self._candidate_slots(source))
            if any(slot.is_available for slot in slots):
                available_dates.append(current)
            current += timedelta(days=1)
        return available_dates

    def validate_request(self, doctor_id: int, center_id: Optional[int], visit_kind: str) -> DoctorProfile:
        """
        Validate the doctor / center / visit kind combination of a request.

        Raises:
            ValidationError: Unknown visit kind
            NotFoundError: Unknown doctor or center
            PolicyViolation: Home visits not offered, or doctor not at the center
        """
        if visit_kind not in VISIT_KINDS:
            raise ValidationError(f"Invalid visit kind: {visit_kind}")

        doctor = self.resolver.get_doctor(doctor_id)

        if visit_kind == VISIT_KIND_HOME:
            if not doctor.home_visits_available:
                raise PolicyViolation("Doctor does not offer home visits", HOME_VISITS_UNAVAILABLE)
            return doctor

        if center_id is not None:
            if not self.schedules.center_exists(center_id):
                raise NotFoundError(f"Center {center_id} not found")
            if not self.schedules.is_doctor_at_center(doctor_id, center_id):
                raise PolicyViolation(
                    f"Doctor {doctor_id} does not practice at center {center_id}", DOCTOR_NOT_AT_CENTER
                )
        return doctor

    @staticmethod
    def _candidate_slots(source: AvailabilitySource) -> List[Slot]:
        """Unannotated candidate slots of a source."""
        if isinstance(source, ExplicitPerCenterSource):
            return [Slot(time=slot.time, duration=slot.duration) for slot in source.slots]
        if isinstance(source, OverrideSource):
            times = SlotGenerator.generate_many(list(source.windows), source.slot_duration)
            return [Slot(time=t, duration=source.slot_duration) for t in times]
        if isinstance(source, WeeklySource):
            times = SlotGenerator.generate(source.window, source.slot_duration)
            return [Slot(time=t, duration=source.slot_duration) for t in times]
        return []

    @staticmethod
    def _windows(source: AvailabilitySource) -> List[WorkingWindow]:
        """Working windows that bound a generated source; empty for explicit slots."""
        if isinstance(source, OverrideSource):
            return list(source.windows)
        if isinstance(source, WeeklySource):
            return [source.window]
        return []
