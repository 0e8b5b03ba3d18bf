"""
Booking service for creating, rescheduling and cancelling appointments.

The availability check done here is advisory: two requests can both pass it.
The repository re-checks for overlap under a lock on the doctor when it
writes, so only one of them is stored and the other gets a `ConflictError`.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from core.constants import (
    APPOINTMENT_TYPES, CANCELLATION_WINDOW_HOURS, MAX_NOTES_LENGTH, STATUS_CANCELLED,
    STATUS_SCHEDULED, VISIT_KIND_HOME, VISIT_KINDS, SLOT_RELEASING_STATUSES,
)
from core.exceptions import (
    ALREADY_CANCELLED, APPOINTMENT_IN_PAST, CANCELLATION_TOO_LATE, INVALID_TRANSITION,
    OUTSIDE_AVAILABILITY, NotFoundError, PolicyViolation, ValidationError,
)
from models import Appointment
from repositories.base import AppointmentRepository, ScheduleRepository
from services.availability_service import AvailabilityService
from services.lifecycle_manager import LifecycleManager
from shared_types import Principal
from utils.datetime_utils import Clock, SystemClock, combine_clinic, format_time, normalize_time

logger = logging.getLogger(__name__)


class BookingService:
    """
    Service class for appointment booking operations.

    Permission checks (who may act on which appointment) are handled by the
    API endpoints. This service assumes the caller has already validated access.
    """

    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        appointment_repository: AppointmentRepository,
        clock: Optional[Clock] = None,
        lifecycle: Optional[LifecycleManager] = None,
    ):
        self.appointments = appointment_repository
        self.clock = clock or SystemClock()
        self.availability = AvailabilityService(schedule_repository, appointment_repository)
        self.lifecycle = lifecycle or LifecycleManager(appointment_repository, self.clock)

    def create_booking(
        self,
        doctor_id: int,
        patient_id: int,
        center_id: Optional[int],
        day: date,
        time: str,
        duration: int,
        appointment_type: str,
        visit_kind: str,
        notes: Optional[str] = None,
        fee: Optional[Decimal] = None,
    ) -> Appointment:
        """
        Book an appointment.

        Args:
            doctor_id: Doctor to book
            patient_id: Patient booking the visit
            center_id: Center of a clinic visit; dropped for home visits
            day: Appointment date
            time: Start time ("HH:MM"; seconds are truncated)
            duration: Visit length in minutes
            appointment_type: consultation, follow_up, emergency or routine
            visit_kind: clinic or home
            notes: Optional notes
            fee: Optional fee

        Returns:
            The stored appointment, status "scheduled"

        Raises:
            ValidationError: Missing or malformed fields
            NotFoundError: Unknown doctor, patient or center
            PolicyViolation: Start in the past, or outside the doctor's availability
            ConflictError: The doctor was booked for this time concurrently
        """
        start_time = self._validate_booking_fields(
            doctor_id, patient_id, day, time, duration, appointment_type, visit_kind, notes
        )
        if visit_kind == VISIT_KIND_HOME:
            center_id = None

        if not self.appointments.patient_exists(patient_id):
            raise NotFoundError(f"Patient {patient_id} not found")

        self._check_bookable(doctor_id, center_id, day, start_time, duration, visit_kind)

        appointment = Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            center_id=center_id,
            date=day,
            time=normalize_time(start_time),
            duration_minutes=duration,
            appointment_type=appointment_type,
            visit_kind=visit_kind,
            status=STATUS_SCHEDULED,
            notes=notes,
            fee=fee,
        )
        appointment = self.appointments.insert(appointment)
        logger.info(
            f"Created appointment {appointment.id}: doctor {doctor_id}, patient {patient_id}, "
            f"{day} {start_time} ({visit_kind})"
        )
        return appointment

    def reschedule_appointment(
        self,
        appointment_id: int,
        new_date: date,
        new_time: str,
        reason: Optional[str] = None,
    ) -> Appointment:
        """
        Move an appointment to a new date/time, keeping its status.

        The appointment's own current slot does not block the new one.

        Raises:
            NotFoundError: No such appointment
            ValidationError: Malformed time
            PolicyViolation: Appointment is cancelled/completed/no-show, the new
                start is in the past, or outside availability
            ConflictError: The new slot was booked concurrently
        """
        appointment = self.appointments.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")

        if appointment.status in SLOT_RELEASING_STATUSES:
            raise PolicyViolation(
                f"Cannot reschedule a {appointment.status} appointment", INVALID_TRANSITION
            )

        start_time = self._parse_time(new_time)
        self._check_bookable(
            appointment.doctor_id,
            appointment.center_id,
            new_date,
            start_time,
            appointment.duration_minutes,
            appointment.visit_kind,
            exclude_appointment_id=appointment_id,
        )

        patch = {"date": new_date, "time": normalize_time(start_time)}
        if reason:
            note = f"Rescheduled: {reason}"
            patch["notes"] = f"{appointment.notes}\n{note}" if appointment.notes else note

        old_slot = f"{appointment.date} {appointment.time_str}"
        updated = self.appointments.update(appointment_id, patch)
        logger.info(f"Rescheduled appointment {appointment_id} from {old_slot} to {new_date} {start_time}")
        return updated

    def cancel_appointment(
        self,
        appointment_id: int,
        reason: Optional[str],
        actor: Principal,
    ) -> Appointment:
        """
        Cancel an appointment.

        Cancellation is allowed up to CANCELLATION_WINDOW_HOURS before the start,
        for every role.

        Raises:
            NotFoundError: No such appointment
            PolicyViolation: Already cancelled (ALREADY_CANCELLED), start passed
                (APPOINTMENT_IN_PAST), inside the window (CANCELLATION_TOO_LATE),
                or terminal status (INVALID_TRANSITION)
        """
        appointment = self.appointments.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")

        if appointment.status == STATUS_CANCELLED:
            raise PolicyViolation("Appointment is already cancelled", ALREADY_CANCELLED)

        hours_until = (appointment.starts_at - self.clock.now()).total_seconds() / 3600
        if hours_until < 0:
            raise PolicyViolation("Cannot cancel an appointment that has already started", APPOINTMENT_IN_PAST)
        if hours_until < CANCELLATION_WINDOW_HOURS:
            logger.warning(
                f"Late cancellation rejected for appointment {appointment_id} "
                f"({hours_until:.1f}h before start, by {actor.role} {actor.id})"
            )
            raise PolicyViolation(
                f"Appointments can only be cancelled at least {CANCELLATION_WINDOW_HOURS} hours in advance",
                CANCELLATION_TOO_LATE,
            )

        cancelled = self.lifecycle.cancel(appointment_id, reason or f"Cancelled by {actor.role}")
        logger.info(f"Appointment {appointment_id} cancelled by {actor.role} {actor.id}")
        return cancelled

    def _check_bookable(
        self,
        doctor_id: int,
        center_id: Optional[int],
        day: date,
        start_time: str,
        duration: int,
        visit_kind: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> None:
        starts_at = combine_clinic(day, normalize_time(start_time))
        if starts_at < self.clock.now():
            raise PolicyViolation("Cannot book an appointment in the past", APPOINTMENT_IN_PAST)

        if not self.availability.is_slot_bookable(
            doctor_id, center_id, day, start_time, duration, visit_kind, exclude_appointment_id
        ):
            logger.warning(
                f"Rejected booking for doctor {doctor_id} at {day} {start_time}: outside availability"
            )
            raise PolicyViolation("outside availability", OUTSIDE_AVAILABILITY)

    def _validate_booking_fields(
        self,
        doctor_id: int,
        patient_id: int,
        day: date,
        time: str,
        duration: int,
        appointment_type: str,
        visit_kind: str,
        notes: Optional[str],
    ) -> str:
        """Validate booking input and return the canonical "HH:MM" start time."""
        if not doctor_id:
            raise ValidationError("doctor_id is required")
        if not patient_id:
            raise ValidationError("patient_id is required")
        if not isinstance(day, date) or isinstance(day, datetime):
            raise ValidationError("date is required")
        if not duration or duration <= 0:
            raise ValidationError("duration must be a positive number of minutes")
        if appointment_type not in APPOINTMENT_TYPES:
            raise ValidationError(f"Invalid appointment type: {appointment_type}")
        if visit_kind not in VISIT_KINDS:
            raise ValidationError(f"Invalid visit kind: {visit_kind}")
        if notes and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"notes cannot exceed {MAX_NOTES_LENGTH} characters")
        return self._parse_time(time)

    @staticmethod
    def _parse_time(value: str) -> str:
        if not value:
            raise ValidationError("time is required")
        try:
            return format_time(value)
        except ValueError as e:
            raise ValidationError(str(e))
