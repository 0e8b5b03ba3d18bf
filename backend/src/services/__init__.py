"""
Services package for shared business logic.

This package contains service classes that encapsulate the scheduling rules
shared by the API endpoints and the background absence sweep.
"""

from .slot_generator import SlotGenerator
from .availability_resolver import AvailabilityResolver
from .conflict_checker import ConflictChecker
from .availability_service import AvailabilityService
from .lifecycle_manager import LifecycleManager, SweepResult
from .booking_service import BookingService
from .doctor_center_service import DoctorCenterService

__all__ = [
    "SlotGenerator",
    "AvailabilityResolver",
    "ConflictChecker",
    "AvailabilityService",
    "LifecycleManager",
    "SweepResult",
    "BookingService",
    "DoctorCenterService",
]
