"""
Date-specific schedule override.

An override fully supersedes weekly hours and per-center schedules for its
date. An empty `windows` list means the doctor is explicitly blocked that day.
"""

from datetime import date as date_type, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Date, ForeignKey, JSON, String, TIMESTAMP, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class ScheduleOverride(Base):
    """Explicit availability for a single date."""

    __tablename__ = "schedule_overrides"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="CASCADE"))

    date: Mapped[date_type] = mapped_column(Date)

    windows: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    """Working windows: [{"start": "10:00", "end": "14:00", "break_start": null, "break_end": null}]."""

    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    doctor = relationship("Doctor", back_populates="overrides")

    __table_args__ = (
        UniqueConstraint('doctor_id', 'date', name='uq_schedule_override_doctor_date'),
    )

    def __repr__(self) -> str:
        return f"<ScheduleOverride(doctor_id={self.doctor_id}, date={self.date}, windows={len(self.windows or [])})>"
