"""
Doctor weekly hours model for the generic (non center-specific) schedule.

One row per doctor and weekday. Rows together form the doctor's `weeklyHours`
map, used for home visits and for clinic visits at centers without an explicit
per-center schedule.
"""

from datetime import time, datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Time, TIMESTAMP, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import WEEKDAY_NAMES
from core.database import Base


class DoctorWeeklyHours(Base):
    """Working hours (with optional break) for one weekday."""

    __tablename__ = "doctor_weekly_hours"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="CASCADE"))
    """Reference to the doctor."""

    day_of_week: Mapped[int] = mapped_column(Integer)
    """Day of the week (0=Sunday, 1=Monday, ..., 6=Saturday)."""

    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)

    break_start: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    break_end: Mapped[Optional[time]] = mapped_column(Time, nullable=True)

    is_working: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    """False keeps the row but marks the weekday as a day off."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    doctor = relationship("Doctor", back_populates="weekly_hours")

    __table_args__ = (
        UniqueConstraint('doctor_id', 'day_of_week', name='uq_doctor_weekly_hours_day'),
        CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='check_weekly_hours_day_of_week'),
    )

    @property
    def day_name(self) -> str:
        return WEEKDAY_NAMES[self.day_of_week]

    def __repr__(self) -> str:
        return f"<DoctorWeeklyHours(doctor_id={self.doctor_id}, day={self.day_name}, {self.start_time}-{self.end_time})>"
