"""
Storage interfaces consumed by the scheduling services.

The services never touch the database directly; they go through these
contracts so the engine does not depend on how data is persisted.
`AppointmentRepository.insert` / `update` must reject a live appointment
whose interval overlaps another live appointment of the same doctor, and
raise `ConflictError` when they do.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from models import Appointment
from shared_types import DateOverride, DateSet, DoctorProfile, ExplicitSchedule, WeeklyHours


class AppointmentRepository(ABC):
    """Contract for appointment data access."""

    @abstractmethod
    def find_by_doctor_and_date(self, doctor_id: int, day: date) -> List[Appointment]:
        """All appointments of a doctor on a date, any center, any status."""

    @abstractmethod
    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        """Get an appointment by ID, or None."""

    @abstractmethod
    def insert(self, appointment: Appointment) -> Appointment:
        """
        Persist a new appointment.

        Raises:
            ConflictError: The doctor already holds a live appointment overlapping that time
        """

    @abstractmethod
    def update(self, appointment_id: int, patch: Dict[str, Any]) -> Appointment:
        """
        Apply field changes to an appointment.

        Raises:
            NotFoundError: No such appointment
            ConflictError: The change collides with another live appointment
        """

    @abstractmethod
    def find_for_sweep(
        self,
        statuses: Sequence[str],
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        until: Optional[date] = None,
    ) -> List[Appointment]:
        """Appointments in the given statuses, optionally filtered by doctor/patient and dated on or before `until`."""

    @abstractmethod
    def cancel_many(
        self,
        appointment_ids: Sequence[int],
        reason: str,
        cancelled_at: datetime,
        from_statuses: Sequence[str],
    ) -> List[int]:
        """
        Cancel several appointments in one transaction.

        Only rows still in `from_statuses` are touched. Either all matching rows
        are updated or none (the transaction is rolled back and the error raised).

        Returns:
            IDs of the rows that were updated
        """

    @abstractmethod
    def list_appointments(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Appointment]:
        """Appointments ordered by date and time."""

    @abstractmethod
    def patient_exists(self, patient_id: int) -> bool:
        """Check that the patient exists."""


class ScheduleRepository(ABC):
    """Contract for doctor schedule data access."""

    @abstractmethod
    def get_doctor(self, doctor_id: int) -> Optional[DoctorProfile]:
        """Active doctor profile, or None."""

    @abstractmethod
    def get_weekly_hours(self, doctor_id: int) -> WeeklyHours:
        """Weekday (0=Sunday) to working hours."""

    @abstractmethod
    def get_vacation_days(self, doctor_id: int) -> DateSet:
        """All vacation dates of the doctor."""

    @abstractmethod
    def get_override(self, doctor_id: int, day: date) -> Optional[DateOverride]:
        """Override for the date, or None."""

    @abstractmethod
    def get_doctor_schedule(self, doctor_id: int, center_id: int, day_of_week: int) -> Optional[ExplicitSchedule]:
        """Per-center explicit schedule for the weekday, or None."""

    @abstractmethod
    def center_exists(self, center_id: int) -> bool:
        """Check that the center exists and is active."""

    @abstractmethod
    def is_doctor_at_center(self, doctor_id: int, center_id: int) -> bool:
        """Check that the doctor is assigned to the center."""
