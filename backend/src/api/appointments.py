# pyright: reportMissingTypeStubs=false
"""
Appointment API endpoints.

Booking, rescheduling, cancellation and status changes. All endpoints require
a bearer token; patients and doctors can only act on their own appointments.
Domain errors raised by the services are turned into JSON responses by the
`SchedulingError` handler in `main.py`.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from api.dependencies import get_booking_service, get_lifecycle_manager
from api.responses import AppointmentListResponse, AppointmentResponse, SweepResponse
from auth.dependencies import get_current_principal, require_admin_role
from auth.permissions import (
    ensure_can_access_appointment, ensure_can_book_for, scope_listing_filters,
)
from core.constants import (
    DEFAULT_APPOINTMENT_DURATION_MINUTES, MAX_NOTES_LENGTH, STATUS_CANCELLED, VISIT_KIND_CLINIC,
)
from core.database import get_db
from core.exceptions import NotFoundError
from models import Appointment
from repositories import SqlAlchemyAppointmentRepository
from services import BookingService, LifecycleManager
from shared_types import Principal

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request Models =====

class AppointmentCreateRequest(BaseModel):
    """Request model for booking an appointment."""
    doctor_id: int
    patient_id: int
    center_id: Optional[int] = None
    date: date
    time: str  # "HH:MM"
    duration_minutes: int = DEFAULT_APPOINTMENT_DURATION_MINUTES
    appointment_type: str
    visit_kind: str = VISIT_KIND_CLINIC
    notes: Optional[str] = None
    fee: Optional[Decimal] = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) > MAX_NOTES_LENGTH:
            raise ValueError(f'notes cannot exceed {MAX_NOTES_LENGTH} characters')
        return v or None


class AppointmentRescheduleRequest(BaseModel):
    """Request model for rescheduling an appointment."""
    date: date
    time: str
    reason: Optional[str] = None


class AppointmentCancelRequest(BaseModel):
    """Request model for cancelling an appointment."""
    reason: Optional[str] = None


class AppointmentStatusRequest(BaseModel):
    """Request model for a status change."""
    status: str
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    reason: Optional[str] = None  # Used when status is "cancelled"


class MarkAbsentRequest(BaseModel):
    """Request model for the absence sweep."""
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None


# ===== Helper Functions =====

def _get_appointment_for(db: Session, appointment_id: int, principal: Principal) -> Appointment:
    appointment = SqlAlchemyAppointmentRepository(db).find_by_id(appointment_id)
    if appointment is None:
        raise NotFoundError(f"Appointment {appointment_id} not found")
    ensure_can_access_appointment(principal, appointment)
    return appointment


# ===== Endpoints =====

@router.post("/appointments", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    request: AppointmentCreateRequest,
    principal: Principal = Depends(get_current_principal),
    booking: BookingService = Depends(get_booking_service),
):
    """
    Book an appointment.

    Returns 409 if the doctor was booked for the same time concurrently; the
    client should refetch availability.
    """
    ensure_can_book_for(principal, request.patient_id, request.doctor_id)

    appointment = booking.create_booking(
        doctor_id=request.doctor_id,
        patient_id=request.patient_id,
        center_id=request.center_id,
        day=request.date,
        time=request.time,
        duration=request.duration_minutes,
        appointment_type=request.appointment_type,
        visit_kind=request.visit_kind,
        notes=request.notes,
        fee=request.fee,
    )
    return AppointmentResponse.from_model(appointment)


@router.get("/appointments", response_model=AppointmentListResponse)
async def list_appointments(
    doctor_id: Optional[int] = Query(None),
    patient_id: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    principal: Principal = Depends(get_current_principal),
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager),
    db: Session = Depends(get_db),
):
    """
    List appointments.

    Past appointments that were never attended are marked absent (for the same
    filters) before listing, so the result never shows them as upcoming.
    """
    doctor_id, patient_id = scope_listing_filters(principal, doctor_id, patient_id)

    sweep = lifecycle.mark_past_as_absent(doctor_id=doctor_id, patient_id=patient_id)
    if sweep.error:
        logger.warning(f"Absence sweep before listing failed: {sweep.error}")

    appointments = SqlAlchemyAppointmentRepository(db).list_appointments(
        doctor_id=doctor_id, patient_id=patient_id, status=status_filter
    )
    return AppointmentListResponse(
        appointments=[AppointmentResponse.from_model(a) for a in appointments]
    )


@router.post("/appointments/mark-absent", response_model=SweepResponse)
async def mark_absent(
    request: Optional[MarkAbsentRequest] = None,
    principal: Principal = Depends(require_admin_role),
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager),
):
    """Cancel past scheduled/confirmed appointments with reason "absent" (admin only)."""
    filters = request or MarkAbsentRequest()
    result = lifecycle.mark_past_as_absent(doctor_id=filters.doctor_id, patient_id=filters.patient_id)
    return SweepResponse(**result.to_dict())


@router.put("/appointments/{appointment_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    request: AppointmentRescheduleRequest,
    principal: Principal = Depends(get_current_principal),
    booking: BookingService = Depends(get_booking_service),
    db: Session = Depends(get_db),
):
    """Move an appointment to a new date/time."""
    _get_appointment_for(db, appointment_id, principal)
    appointment = booking.reschedule_appointment(
        appointment_id, request.date, request.time, request.reason
    )
    return AppointmentResponse.from_model(appointment)


@router.put("/appointments/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    request: Optional[AppointmentCancelRequest] = None,
    principal: Principal = Depends(get_current_principal),
    booking: BookingService = Depends(get_booking_service),
    db: Session = Depends(get_db),
):
    """
    Cancel an appointment.

    Rejected with code APPOINTMENT_IN_PAST or CANCELLATION_TOO_LATE when the
    start is in the past or less than 24 hours away.
    """
    _get_appointment_for(db, appointment_id, principal)
    reason = request.reason if request else None
    appointment = booking.cancel_appointment(appointment_id, reason, principal)
    return AppointmentResponse.from_model(appointment)


@router.put("/appointments/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    request: AppointmentStatusRequest,
    principal: Principal = Depends(get_current_principal),
    booking: BookingService = Depends(get_booking_service),
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager),
    db: Session = Depends(get_db),
):
    """
    Change an appointment's status.

    "cancelled" goes through the cancellation rules; every other status
    follows the lifecycle transition table.
    """
    _get_appointment_for(db, appointment_id, principal)

    if request.status == STATUS_CANCELLED:
        appointment = booking.cancel_appointment(appointment_id, request.reason, principal)
    else:
        if principal.is_patient:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Doctor or admin access required"
            )
        appointment = lifecycle.update_status(
            appointment_id, request.status, request.diagnosis, request.prescription
        )
    return AppointmentResponse.from_model(appointment)
