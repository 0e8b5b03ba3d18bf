"""
SQLAlchemy implementation of the appointment repository.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import DEFAULT_APPOINTMENT_DURATION_MINUTES, SLOT_RELEASING_STATUSES
from core.exceptions import ConflictError, NotFoundError
from models import Appointment, Doctor, Patient
from repositories.base import AppointmentRepository
from utils.datetime_utils import intervals_overlap, time_to_minutes

logger = logging.getLogger(__name__)

DOUBLE_BOOKING_MESSAGE = "doctor already booked at this time"

# Changing any of these can move an appointment onto another one
_SLOT_FIELDS = frozenset({"date", "time", "duration_minutes"})


class SqlAlchemyAppointmentRepository(AppointmentRepository):
    """
    Appointment storage backed by a SQLAlchemy session.

    Writes commit immediately. Before a live appointment is written, the
    doctor row is locked (`SELECT ... FOR UPDATE`) and the doctor's live
    appointments for the day are re-checked for overlap inside the same
    transaction, so concurrent bookings with different start times cannot
    both land. A uniqueness violation from the `uq_appointments_doctor_slot`
    partial index is the last line for identical starts. Either way the
    session is rolled back and `ConflictError` is raised.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_doctor_and_date(self, doctor_id: int, day: date) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.doctor_id == doctor_id,
            Appointment.date == day,
        ).order_by(Appointment.time)
        return list(self.db.scalars(stmt).all())

    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.get(Appointment, appointment_id)

    def insert(self, appointment: Appointment) -> Appointment:
        try:
            if appointment.status not in SLOT_RELEASING_STATUSES:
                self._ensure_no_overlap(
                    appointment.doctor_id,
                    appointment.date,
                    appointment.time,
                    appointment.duration_minutes or DEFAULT_APPOINTMENT_DURATION_MINUTES,
                )
            self.db.add(appointment)
            self.db.commit()
        except ConflictError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            logger.warning(f"Appointment booking conflict: {e.orig}")
            self.db.rollback()
            raise ConflictError(DOUBLE_BOOKING_MESSAGE)
        self.db.refresh(appointment)
        return appointment

    def update(self, appointment_id: int, patch: Dict[str, Any]) -> Appointment:
        appointment = self.db.get(Appointment, appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")

        for field_name, value in patch.items():
            if not hasattr(Appointment, field_name):
                raise ValueError(f"Unknown appointment field: {field_name}")

        try:
            status = patch.get("status", appointment.status)
            if _SLOT_FIELDS & patch.keys() and status not in SLOT_RELEASING_STATUSES:
                self._ensure_no_overlap(
                    appointment.doctor_id,
                    patch.get("date", appointment.date),
                    patch.get("time", appointment.time),
                    patch.get("duration_minutes", appointment.duration_minutes),
                    exclude_appointment_id=appointment_id,
                )
            for field_name, value in patch.items():
                setattr(appointment, field_name, value)
            self.db.commit()
        except ConflictError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            logger.warning(f"Appointment update conflict for {appointment_id}: {e.orig}")
            self.db.rollback()
            raise ConflictError(DOUBLE_BOOKING_MESSAGE)
        self.db.refresh(appointment)
        return appointment

    def find_for_sweep(
        self,
        statuses: Sequence[str],
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        until: Optional[date] = None,
    ) -> List[Appointment]:
        stmt = select(Appointment).where(Appointment.status.in_(list(statuses)))
        if until is not None:
            stmt = stmt.where(Appointment.date <= until)
        if doctor_id is not None:
            stmt = stmt.where(Appointment.doctor_id == doctor_id)
        if patient_id is not None:
            stmt = stmt.where(Appointment.patient_id == patient_id)
        return list(self.db.scalars(stmt.order_by(Appointment.date, Appointment.time)).all())

    def cancel_many(
        self,
        appointment_ids: Sequence[int],
        reason: str,
        cancelled_at: datetime,
        from_statuses: Sequence[str],
    ) -> List[int]:
        if not appointment_ids:
            return []

        where_clause = (
            Appointment.id.in_(list(appointment_ids)),
            Appointment.status.in_(list(from_statuses)),
        )
        try:
            # Re-read inside the transaction so rows changed since the sweep query are skipped
            ids = list(self.db.scalars(select(Appointment.id).where(*where_clause)).all())
            if ids:
                self.db.execute(
                    update(Appointment)
                    .where(Appointment.id.in_(ids))
                    .values(
                        status="cancelled",
                        cancellation_reason=reason,
                        cancelled_at=cancelled_at,
                        updated_at=cancelled_at,
                    )
                    .execution_options(synchronize_session="fetch")
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return ids

    def list_appointments(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Appointment]:
        stmt = select(Appointment)
        if doctor_id is not None:
            stmt = stmt.where(Appointment.doctor_id == doctor_id)
        if patient_id is not None:
            stmt = stmt.where(Appointment.patient_id == patient_id)
        if status is not None:
            stmt = stmt.where(Appointment.status == status)
        return list(self.db.scalars(stmt.order_by(Appointment.date, Appointment.time)).all())

    def patient_exists(self, patient_id: int) -> bool:
        return self.db.get(Patient, patient_id) is not None

    def _ensure_no_overlap(
        self,
        doctor_id: int,
        day: date,
        start: time,
        duration_minutes: int,
        exclude_appointment_id: Optional[int] = None,
    ) -> None:
        """
        Lock the doctor and reject a [start, start + duration) that hits a live appointment.

        The lock is held until the caller commits or rolls back, which
        serializes writers for the same doctor. SQLite has no row locks and
        relies on its single-writer database lock instead.
        """
        self.db.execute(select(Doctor.id).where(Doctor.id == doctor_id).with_for_update())

        stmt = select(Appointment).where(
            Appointment.doctor_id == doctor_id,
            Appointment.date == day,
            Appointment.status.not_in(list(SLOT_RELEASING_STATUSES)),
        )
        if exclude_appointment_id is not None:
            stmt = stmt.where(Appointment.id != exclude_appointment_id)

        new_start = time_to_minutes(start)
        new_end = new_start + duration_minutes
        for other in self.db.scalars(stmt):
            other_start = time_to_minutes(other.time)
            if intervals_overlap(new_start, new_end, other_start, other_start + other.duration_minutes):
                logger.warning(
                    f"Appointment booking conflict: doctor {doctor_id} {day} {other.time_str} "
                    f"(appointment {other.id}) overlaps the requested time"
                )
                raise ConflictError(DOUBLE_BOOKING_MESSAGE)
