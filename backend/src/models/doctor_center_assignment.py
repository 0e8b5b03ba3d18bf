"""
Association between doctors and the centers they work at.

A doctor may be assigned to zero or more centers; at most one assignment is
primary. `DoctorCenterService.assign` unsets the previous primary before
marking a new one.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, TIMESTAMP, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class DoctorCenterAssignment(Base):
    """Doctor works at center."""

    __tablename__ = "doctor_center_assignments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="CASCADE"))
    center_id: Mapped[int] = mapped_column(ForeignKey("centers.id", ondelete="CASCADE"))

    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    doctor = relationship("Doctor", back_populates="center_assignments")
    center = relationship("Center", back_populates="doctor_assignments")

    __table_args__ = (
        UniqueConstraint('doctor_id', 'center_id', name='uq_doctor_center_assignment'),
    )

    def __repr__(self) -> str:
        return f"<DoctorCenterAssignment(doctor_id={self.doctor_id}, center_id={self.center_id}, primary={self.is_primary})>"
