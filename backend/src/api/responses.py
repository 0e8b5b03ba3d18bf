"""
Shared response models for API endpoints.

This module contains Pydantic response models that are shared across
the availability and appointment endpoints.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from models import Appointment


class AvailabilitySlot(BaseModel):
    """One candidate slot with its booking state."""
    time: str  # "HH:MM"
    duration: int
    is_available: bool
    is_booked: bool


class AvailabilityResponse(BaseModel):
    """Response model for a doctor's slots on a date."""
    date: date
    doctor_id: int
    center_id: Optional[int] = None
    visit_kind: str
    slots: List[AvailabilitySlot]


class AvailableDatesResponse(BaseModel):
    """Response model for dates with at least one free slot."""
    doctor_id: int
    dates: List[date]


class AppointmentResponse(BaseModel):
    """Response model for appointment details."""
    id: int
    doctor_id: int
    patient_id: int
    center_id: Optional[int] = None
    date: date
    time: str  # "HH:MM"
    duration_minutes: int
    appointment_type: str
    visit_kind: str
    status: str
    cancellation_reason: Optional[str] = None
    notes: Optional[str] = None
    fee: Optional[Decimal] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            doctor_id=appointment.doctor_id,
            patient_id=appointment.patient_id,
            center_id=appointment.center_id,
            date=appointment.date,
            time=appointment.time_str,
            duration_minutes=appointment.duration_minutes,
            appointment_type=appointment.appointment_type,
            visit_kind=appointment.visit_kind,
            status=appointment.status,
            cancellation_reason=appointment.cancellation_reason,
            notes=appointment.notes,
            fee=appointment.fee,
            cancelled_at=appointment.cancelled_at,
            completed_at=appointment.completed_at,
            created_at=appointment.created_at,
        )


class AppointmentListResponse(BaseModel):
    """Response model for listing appointments."""
    appointments: List[AppointmentResponse]


class SweepResponse(BaseModel):
    """Response model for the absence sweep."""
    updated_count: int
    updated_ids: List[int]
    error: Optional[str] = None
