# pyright: reportMissingTypeStubs=false
"""
Ownership checks for appointment access.

Patients may only act on their own appointments, doctors only on appointments
booked with them, admins on any.
"""

from typing import Optional

from fastapi import HTTPException, status

from models import Appointment
from shared_types import Principal


def ensure_can_book_for(principal: Principal, patient_id: int, doctor_id: int) -> None:
    """Ensure the principal may create a booking for this patient/doctor pair."""
    if principal.is_admin:
        return
    if principal.is_patient and principal.id == patient_id:
        return
    if principal.is_doctor and principal.id == doctor_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied: You can only book your own appointments"
    )


def ensure_can_access_appointment(principal: Principal, appointment: Appointment) -> None:
    """Ensure the principal owns the appointment (or is an admin)."""
    if principal.is_admin:
        return
    if principal.is_patient and appointment.patient_id == principal.id:
        return
    if principal.is_doctor and appointment.doctor_id == principal.id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied: You can only access your own appointments"
    )


def scope_listing_filters(
    principal: Principal,
    doctor_id: Optional[int],
    patient_id: Optional[int],
) -> tuple[Optional[int], Optional[int]]:
    """
    Narrow listing filters to what the principal may see.

    Returns:
        (doctor_id, patient_id) to query with
    """
    if principal.is_admin:
        return doctor_id, patient_id

    if principal.is_patient:
        if patient_id is not None and patient_id != principal.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: You can only access your own appointments"
            )
        return doctor_id, principal.id

    if doctor_id is not None and doctor_id != principal.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied: You can only access your own appointments"
        )
    return principal.id, patient_id
