"""
Patient model representing individuals who book appointments.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Patient(Base):
    """Patient entity. Profile management lives outside the scheduling engine."""

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the patient."""

    full_name: Mapped[str] = mapped_column(String(255))
    """Full name of the patient."""

    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    appointments = relationship("Appointment", back_populates="patient")

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, full_name='{self.full_name}')>"
