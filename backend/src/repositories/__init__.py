"""
Repositories package: storage contracts and their SQLAlchemy implementations.
"""

from .base import AppointmentRepository, ScheduleRepository
from .appointment_repository import SqlAlchemyAppointmentRepository
from .schedule_repository import SqlAlchemyScheduleRepository

__all__ = [
    "AppointmentRepository",
    "ScheduleRepository",
    "SqlAlchemyAppointmentRepository",
    "SqlAlchemyScheduleRepository",
]
