"""
SQLAlchemy implementation of the schedule repository.

Converts the ORM rows of the different availability tables into the shared
dataclasses, canonicalizing every stored time to "HH:MM" on the way out.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.exceptions import InvalidConfigError
from models import (
    Center, Doctor, DoctorCenterAssignment, DoctorSchedule, DoctorVacation,
    DoctorWeeklyHours, ScheduleOverride,
)
from repositories.base import ScheduleRepository
from shared_types import (
    DateOverride, DateSet, DayHours, DoctorProfile, ExplicitSchedule, ExplicitSlot,
    WeeklyHours, WorkingWindow,
)
from utils.datetime_utils import format_time

logger = logging.getLogger(__name__)


class SqlAlchemyScheduleRepository(ScheduleRepository):
    """Schedule storage backed by a SQLAlchemy session (read-only)."""

    def __init__(self, db: Session):
        self.db = db

    def get_doctor(self, doctor_id: int) -> Optional[DoctorProfile]:
        doctor = self.db.get(Doctor, doctor_id)
        if doctor is None or not doctor.is_active:
            return None
        return DoctorProfile(
            id=doctor.id,
            full_name=doctor.full_name,
            slot_duration_minutes=doctor.slot_duration_minutes,
            home_visits_available=doctor.home_visits_available,
            is_active=doctor.is_active,
        )

    def get_weekly_hours(self, doctor_id: int) -> WeeklyHours:
        rows = self.db.scalars(
            select(DoctorWeeklyHours).where(DoctorWeeklyHours.doctor_id == doctor_id)
        ).all()
        return {
            row.day_of_week: DayHours(
                start=format_time(row.start_time),
                end=format_time(row.end_time),
                break_start=format_time(row.break_start) if row.break_start else None,
                break_end=format_time(row.break_end) if row.break_end else None,
                is_working=row.is_working,
            )
            for row in rows
        }

    def get_vacation_days(self, doctor_id: int) -> DateSet:
        rows = self.db.scalars(
            select(DoctorVacation).where(DoctorVacation.doctor_id == doctor_id)
        ).all()
        return DateSet([(row.start_date, row.end_date) for row in rows])

    def get_override(self, doctor_id: int, day: date) -> Optional[DateOverride]:
        row = self.db.scalars(
            select(ScheduleOverride).where(
                ScheduleOverride.doctor_id == doctor_id,
                ScheduleOverride.date == day,
            )
        ).first()
        if row is None:
            return None
        try:
            windows = tuple(WorkingWindow.from_dict(w) for w in (row.windows or []))
        except ValueError as e:
            raise InvalidConfigError(f"Invalid override {row.id} for doctor {doctor_id}: {e}")
        return DateOverride(doctor_id=doctor_id, date=day, windows=windows, reason=row.reason)

    def get_doctor_schedule(self, doctor_id: int, center_id: int, day_of_week: int) -> Optional[ExplicitSchedule]:
        row = self.db.scalars(
            select(DoctorSchedule).where(
                DoctorSchedule.doctor_id == doctor_id,
                DoctorSchedule.center_id == center_id,
                DoctorSchedule.day_of_week == day_of_week,
            )
        ).first()
        if row is None:
            return None

        slots = []
        try:
            for raw in row.slots or []:
                slots.append(ExplicitSlot(
                    time=format_time(raw["time"]),
                    duration=int(raw.get("duration") or row.slot_duration),
                ))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidConfigError(f"Invalid slot list in doctor schedule {row.id}: {e}")

        return ExplicitSchedule(
            doctor_id=doctor_id,
            center_id=center_id,
            day_of_week=day_of_week,
            slot_duration=row.slot_duration,
            slots=tuple(sorted(slots, key=lambda s: s.time)),
            is_available=row.is_available,
        )

    def center_exists(self, center_id: int) -> bool:
        center = self.db.get(Center, center_id)
        return center is not None and center.is_active

    def is_doctor_at_center(self, doctor_id: int, center_id: int) -> bool:
        assignment = self.db.scalars(
            select(DoctorCenterAssignment).where(
                DoctorCenterAssignment.doctor_id == doctor_id,
                DoctorCenterAssignment.center_id == center_id,
            )
        ).first()
        return assignment is not None
