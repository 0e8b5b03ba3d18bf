"""
Appointment model representing booked visits between patients and doctors.

Appointments are created by the BookingService and mutated only through
LifecycleManager transitions (status) or rescheduling (date/time). They are
never physically deleted: cancellation and absence are statuses.
"""

from datetime import date as date_type, time as time_type, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, Integer, Numeric, TIMESTAMP, Date, Time, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import DEFAULT_APPOINTMENT_DURATION_MINUTES, STATUS_SCHEDULED
from core.database import Base
from utils.datetime_utils import combine_clinic, format_time

# Rows in these statuses no longer hold their slot, see SLOT_RELEASING_STATUSES
_LIVE_SLOT_PREDICATE = "status NOT IN ('cancelled', 'no_show', 'completed')"


class Appointment(Base):
    """
    Appointment entity.

    The (doctor_id, date, time) triple is unique among live appointments,
    regardless of center or visit kind. Together with the repository's locked
    overlap check on write it rejects the second of two concurrent bookings;
    the availability check that precedes an insert is only a fast pre-filter.
    """

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the appointment."""

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id"))
    """Doctor being booked."""

    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id"))
    """Patient who booked."""

    center_id: Mapped[Optional[int]] = mapped_column(ForeignKey("centers.id"), nullable=True)
    """Center of a clinic visit. NULL for home visits or visits with no fixed center."""

    date: Mapped[date_type] = mapped_column(Date)
    """Appointment date (clinic local)."""

    time: Mapped[time_type] = mapped_column(Time)
    """Start time, always stored with seconds stripped."""

    duration_minutes: Mapped[int] = mapped_column(Integer, default=DEFAULT_APPOINTMENT_DURATION_MINUTES, nullable=False)
    """Length of the visit. Authoritative for conflict checks."""

    appointment_type: Mapped[str] = mapped_column(String(50))
    """One of 'consultation', 'follow_up', 'emergency', 'routine'."""

    visit_kind: Mapped[str] = mapped_column(String(20), default="clinic", nullable=False)
    """'clinic' or 'home'."""

    status: Mapped[str] = mapped_column(String(50), default=STATUS_SCHEDULED, nullable=False)
    """Current lifecycle status, see services.lifecycle_manager.TRANSITIONS."""

    cancellation_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Free-text reason, or 'absent' when set by the absence sweep."""

    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    cancelled_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    # Relationships
    doctor = relationship("Doctor")
    patient = relationship("Patient", back_populates="appointments")
    center = relationship("Center")

    __table_args__ = (
        Index(
            'uq_appointments_doctor_slot',
            'doctor_id', 'date', 'time',
            unique=True,
            postgresql_where=text(_LIVE_SLOT_PREDICATE),
            sqlite_where=text(_LIVE_SLOT_PREDICATE),
        ),
        Index('idx_appointments_doctor_date', 'doctor_id', 'date'),
        Index('idx_appointments_patient', 'patient_id'),
        Index('idx_appointments_status', 'status'),
    )

    @property
    def time_str(self) -> str:
        """Start time as "HH:MM"."""
        return format_time(self.time)

    @property
    def starts_at(self) -> datetime:
        """Aware start datetime in the clinic timezone."""
        return combine_clinic(self.date, self.time)

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, {self.date} {self.time_str}, "
            f"status='{self.status}')>"
        )
