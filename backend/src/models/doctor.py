"""
Doctor model representing practitioners who can be booked.

A doctor carries the scheduling defaults used when generating slots from the
generic weekly hours, and owns the weekly hours, vacations, per-center
schedules and date overrides that feed availability resolution.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Boolean, Integer, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import DEFAULT_SLOT_DURATION_MINUTES
from core.database import Base


class Doctor(Base):
    """
    Doctor entity.

    Profile fields are mutated only by the doctor or an admin. Appointments
    reference the doctor but are never cascaded on delete (appointments are
    soft-deleted through their status only).
    """

    __tablename__ = "doctors"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the doctor."""

    full_name: Mapped[str] = mapped_column(String(255))
    """Display name of the doctor."""

    slot_duration_minutes: Mapped[int] = mapped_column(Integer, default=DEFAULT_SLOT_DURATION_MINUTES, nullable=False)
    """Slot length used when generating slots from weekly hours or date overrides."""

    home_visits_available: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    """Whether patients can book home visits with this doctor."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    """Inactive doctors cannot be found for scheduling."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    # Relationships
    weekly_hours = relationship("DoctorWeeklyHours", back_populates="doctor", cascade="all, delete-orphan")
    vacations = relationship("DoctorVacation", back_populates="doctor", cascade="all, delete-orphan")
    center_assignments = relationship("DoctorCenterAssignment", back_populates="doctor", cascade="all, delete-orphan")
    schedules = relationship("DoctorSchedule", back_populates="doctor", cascade="all, delete-orphan")
    overrides = relationship("ScheduleOverride", back_populates="doctor", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Doctor(id={self.id}, full_name='{self.full_name}')>"
