"""
Service wiring for the API endpoints.

Builds the scheduling services on top of the request's database session. The
clock is its own dependency so tests can override it with a `FixedClock`.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from repositories import SqlAlchemyAppointmentRepository, SqlAlchemyScheduleRepository
from services import AvailabilityService, BookingService, LifecycleManager
from utils.datetime_utils import Clock, SystemClock

_system_clock = SystemClock()


def get_clock() -> Clock:
    """Clock used for every "now"-relative decision."""
    return _system_clock


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(SqlAlchemyScheduleRepository(db), SqlAlchemyAppointmentRepository(db))


def get_lifecycle_manager(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> LifecycleManager:
    return LifecycleManager(SqlAlchemyAppointmentRepository(db), clock)


def get_booking_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    lifecycle: LifecycleManager = Depends(get_lifecycle_manager),
) -> BookingService:
    return BookingService(
        SqlAlchemyScheduleRepository(db),
        SqlAlchemyAppointmentRepository(db),
        clock=clock,
        lifecycle=lifecycle,
    )
