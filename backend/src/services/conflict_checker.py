"""
Conflict detection between candidate slots and existing appointments.

Conflicts are doctor-global: appointments at every center and of every visit
kind block the doctor's time.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from core.constants import SLOT_RELEASING_STATUSES
from repositories.base import AppointmentRepository
from shared_types import Slot
from utils.datetime_utils import intervals_overlap, time_to_minutes

logger = logging.getLogger(__name__)


class ConflictChecker:
    """Marks candidate slots that overlap a live appointment."""

    def __init__(self, appointment_repository: AppointmentRepository):
        self.appointments = appointment_repository

    def busy_intervals(
        self,
        doctor_id: int,
        day: date,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[Tuple[int, int]]:
        """
        Get the doctor's occupied [start, end) minute intervals for a date.

        Cancelled, no-show and completed appointments do not occupy time.
        """
        intervals: List[Tuple[int, int]] = []
        for appointment in self.appointments.find_by_doctor_and_date(doctor_id, day):
            if appointment.status in SLOT_RELEASING_STATUSES:
                continue
            if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
                continue
            start = time_to_minutes(appointment.time)
            intervals.append((start, start + appointment.duration_minutes))
        return intervals

    def annotate(
        self,
        doctor_id: int,
        day: date,
        slots: List[Slot],
        exclude_appointment_id: Optional[int] = None,
    ) -> List[Slot]:
        """
        Set `is_booked` on every slot that intersects a live appointment.

        Returns the same slots for convenience.
        """
        busy = self.busy_intervals(doctor_id, day, exclude_appointment_id)
        for slot in slots:
            slot.is_booked = any(
                intervals_overlap(slot.start_minutes, slot.end_minutes, start, end)
                for start, end in busy
            )
        return slots

    def has_conflict(
        self,
        doctor_id: int,
        day: date,
        start_minutes: int,
        end_minutes: int,
        exclude_appointment_id: Optional[int] = None,
    ) -> bool:
        """Check if [start, end) intersects any live appointment of the doctor."""
        return any(
            intervals_overlap(start_minutes, end_minutes, start, end)
            for start, end in self.busy_intervals(doctor_id, day, exclude_appointment_id)
        )
