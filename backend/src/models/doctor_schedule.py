"""
Per-center explicit doctor schedule.

For a (doctor, center, weekday) this lists the exact slots offered, each with
its own duration. When present and available it replaces the doctor's generic
weekly hours for clinic visits at that center.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, JSON, TIMESTAMP, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import DEFAULT_SLOT_DURATION_MINUTES
from core.database import Base


class DoctorSchedule(Base):
    """Explicit slot list for one doctor at one center on one weekday."""

    __tablename__ = "doctor_schedules"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="CASCADE"))
    center_id: Mapped[int] = mapped_column(ForeignKey("centers.id", ondelete="CASCADE"))

    day_of_week: Mapped[int] = mapped_column(Integer)
    """Day of the week (0=Sunday, ..., 6=Saturday)."""

    slot_duration: Mapped[int] = mapped_column(Integer, default=DEFAULT_SLOT_DURATION_MINUTES, nullable=False)
    """Fallback duration for listed slots that don't carry their own."""

    slots: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    """Slot list: [{"time": "09:00", "duration": 30}, ...]."""

    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    doctor = relationship("Doctor", back_populates="schedules")
    center = relationship("Center")

    __table_args__ = (
        UniqueConstraint('doctor_id', 'center_id', 'day_of_week', name='uq_doctor_schedule_center_day'),
        CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='check_doctor_schedule_day_of_week'),
    )

    def __repr__(self) -> str:
        return f"<DoctorSchedule(doctor_id={self.doctor_id}, center_id={self.center_id}, day={self.day_of_week})>"
