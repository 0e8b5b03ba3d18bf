"""
Center model representing a physical location where doctors see patients.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, JSON, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Center(Base):
    """
    Center entity.

    `operating_hours` maps a lowercase weekday name to `{"open": "HH:MM",
    "close": "HH:MM"}` or null when the center is closed that day.
    """

    __tablename__ = "centers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(255))

    operating_hours: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    doctor_assignments = relationship("DoctorCenterAssignment", back_populates="center", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Center(id={self.id}, name='{self.name}')>"
