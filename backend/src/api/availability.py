# pyright: reportMissingTypeStubs=false
"""
Availability API endpoints.

Read-only queries over a doctor's bookable slots. These endpoints do not
require authentication.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_availability_service
from api.responses import AvailabilityResponse, AvailabilitySlot, AvailableDatesResponse
from core.constants import VISIT_KIND_CLINIC
from core.exceptions import ValidationError
from services import AvailabilityService
from utils.datetime_utils import parse_date_string

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_date_param(value: str, name: str) -> date:
    try:
        return parse_date_string(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} (expected YYYY-MM-DD): {value}")


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    doctor_id: int = Query(...),
    date: str = Query(..., description="Date in YYYY-MM-DD format"),
    center_id: Optional[int] = Query(None),
    visit_kind: str = Query(VISIT_KIND_CLINIC),
    service: AvailabilityService = Depends(get_availability_service),
):
    """
    Get every slot of a doctor on a date, annotated with booking state.

    Booked slots are included with `is_available=false`.
    """
    requested_date = _parse_date_param(date, "date")
    slots = service.get_available_slots(doctor_id, center_id, requested_date, visit_kind)
    return AvailabilityResponse(
        date=requested_date,
        doctor_id=doctor_id,
        center_id=center_id,
        visit_kind=visit_kind,
        slots=[AvailabilitySlot(**slot.to_dict()) for slot in slots],
    )


@router.get("/availability/dates", response_model=AvailableDatesResponse)
async def get_available_dates(
    doctor_id: int = Query(...),
    start_date: str = Query(..., description="First date in YYYY-MM-DD format"),
    end_date: str = Query(..., description="Last date in YYYY-MM-DD format"),
    center_id: Optional[int] = Query(None),
    visit_kind: str = Query(VISIT_KIND_CLINIC),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get the dates in a range (at most 31 days) that still have a free slot."""
    dates = service.get_available_dates(
        doctor_id,
        center_id,
        _parse_date_param(start_date, "start_date"),
        _parse_date_param(end_date, "end_date"),
        visit_kind,
    )
    return AvailableDatesResponse(doctor_id=doctor_id, dates=dates)
