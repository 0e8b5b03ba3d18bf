"""
Unit tests for availability source resolution.

Uses a mocked schedule repository so every precedence rule can be checked in
isolation.
"""

import pytest
from datetime import date
from unittest.mock import Mock

from core.exceptions import NotFoundError
from repositories.base import ScheduleRepository
from services.availability_resolver import AvailabilityResolver
from shared_types import (
    DateOverride, DateSet, DayHours, DoctorProfile, ExplicitPerCenterSource, ExplicitSchedule,
    ExplicitSlot, OverrideSource, Unavailable, WeeklySource, WorkingWindow,
)

MONDAY = date(2026, 3, 2)
SATURDAY = date(2026, 3, 7)
SUNDAY = date(2026, 3, 8)


def _schedule_repository(
    doctor=None,
    weekly_hours=None,
    vacations=None,
    override=None,
    schedule=None,
):
    repo = Mock(spec=ScheduleRepository)
    repo.get_doctor.return_value = doctor or DoctorProfile(
        id=1, full_name="Dr. Test", slot_duration_minutes=20, home_visits_available=True
    )
    repo.get_weekly_hours.return_value = weekly_hours if weekly_hours is not None else {
        1: DayHours("09:00", "17:00", "12:00", "13:00"),
        6: DayHours("09:00", "12:00", is_working=False),
    }
    repo.get_vacation_days.return_value = vacations or DateSet()
    repo.get_override.return_value = override
    repo.get_doctor_schedule.return_value = schedule
    return repo


def _explicit_schedule(is_available=True):
    return ExplicitSchedule(
        doctor_id=1,
        center_id=7,
        day_of_week=1,
        slot_duration=30,
        slots=(ExplicitSlot("10:00", 30), ExplicitSlot("11:00", 45)),
        is_available=is_available,
    )


class TestResolvePrecedence:
    """Test that exactly one source applies, in precedence order."""

    def test_vacation_wins_over_everything(self):
        """A vacation day is unavailable even with an override and an explicit schedule."""
        repo = _schedule_repository(
            vacations=DateSet([(MONDAY, MONDAY)]),
            override=DateOverride(doctor_id=1, date=MONDAY, windows=(WorkingWindow("10:00", "12:00"),)),
            schedule=_explicit_schedule(),
        )

        source = AvailabilityResolver(repo).resolve(1, 7, MONDAY, "clinic")

        assert source == Unavailable(reason="vacation")
        repo.get_override.assert_not_called()

    def test_override_supersedes_schedule_and_weekly_hours(self):
        """An override replaces every weekly and per-center source for its date."""
        windows = (WorkingWindow("10:00", "14:00"),)
        repo = _schedule_repository(
            override=DateOverride(doctor_id=1, date=MONDAY, windows=windows),
            schedule=_explicit_schedule(),
        )

        source = AvailabilityResolver(repo).resolve(1, 7, MONDAY, "clinic")

        assert isinstance(source, OverrideSource)
        assert source.windows == windows
        assert source.slot_duration == 20
        repo.get_doctor_schedule.assert_not_called()

    def test_empty_override_blocks_date(self):
        """An override without windows is an explicit block."""
        repo = _schedule_repository(override=DateOverride(doctor_id=1, date=MONDAY, windows=()))

        source = AvailabilityResolver(repo).resolve(1, None, MONDAY, "clinic")

        assert isinstance(source, OverrideSource)
        assert source.windows == ()

    def test_explicit_schedule_for_clinic_visit_at_center(self):
        repo = _schedule_repository(schedule=_explicit_schedule())

        source = AvailabilityResolver(repo).resolve(1, 7, MONDAY, "clinic")

        assert isinstance(source, ExplicitPerCenterSource)
        assert source.center_id == 7
        assert [s.time for s in source.slots] == ["10:00", "11:00"]
        repo.get_doctor_schedule.assert_called_once_with(1, 7, 1)

    def test_unavailable_explicit_schedule_falls_through_to_weekly(self):
        repo = _schedule_repository(schedule=_explicit_schedule(is_available=False))

        source = AvailabilityResolver(repo).resolve(1, 7, MONDAY, "clinic")

        assert isinstance(source, WeeklySource)

    def test_home_visit_ignores_center_schedule(self):
        """Home visits always use the generic weekly hours."""
        repo = _schedule_repository(schedule=_explicit_schedule())

        source = AvailabilityResolver(repo).resolve(1, 7, MONDAY, "home")

        assert isinstance(source, WeeklySource)
        repo.get_doctor_schedule.assert_not_called()

    def test_clinic_visit_without_center_uses_weekly_hours(self):
        repo = _schedule_repository()

        source = AvailabilityResolver(repo).resolve(1, None, MONDAY, "clinic")

        assert source == WeeklySource(window=WorkingWindow("09:00", "17:00", "12:00", "13:00"), slot_duration=20)
        repo.get_doctor_schedule.assert_not_called()

    def test_non_working_weekday(self):
        """A weekday marked not working is unavailable."""
        repo = _schedule_repository()

        assert AvailabilityResolver(repo).resolve(1, None, SATURDAY, "clinic") == Unavailable(reason="not_working")

    def test_weekday_without_hours(self):
        repo = _schedule_repository(weekly_hours={})

        assert AvailabilityResolver(repo).resolve(1, None, MONDAY, "clinic") == Unavailable(reason="not_working")

    def test_sunday_is_day_zero(self):
        repo = _schedule_repository(weekly_hours={0: DayHours("10:00", "14:00")})

        source = AvailabilityResolver(repo).resolve(1, 7, SUNDAY, "clinic")

        assert source == WeeklySource(window=WorkingWindow("10:00", "14:00"), slot_duration=20)
        repo.get_doctor_schedule.assert_called_once_with(1, 7, 0)


class TestGetDoctor:
    def test_unknown_doctor_raises(self):
        repo = _schedule_repository()
        repo.get_doctor.return_value = None

        with pytest.raises(NotFoundError):
            AvailabilityResolver(repo).resolve(99, None, MONDAY, "clinic")
