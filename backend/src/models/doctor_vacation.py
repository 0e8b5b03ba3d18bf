"""
Doctor vacation model.

Vacations are inclusive date ranges; a single day off is stored with
start_date == end_date. Any date inside a range yields no availability and
blocks new bookings regardless of every other availability source.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, String, TIMESTAMP, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class DoctorVacation(Base):
    """Inclusive vacation range for a doctor."""

    __tablename__ = "doctor_vacations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="CASCADE"))

    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)

    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    doctor = relationship("Doctor", back_populates="vacations")

    __table_args__ = (
        Index('idx_doctor_vacations_doctor_dates', 'doctor_id', 'start_date', 'end_date'),
        CheckConstraint('end_date >= start_date', name='check_vacation_range'),
    )

    def __repr__(self) -> str:
        return f"<DoctorVacation(doctor_id={self.doctor_id}, {self.start_date}..{self.end_date})>"
