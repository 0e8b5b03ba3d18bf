"""
Unit tests for model helpers and table definitions.
"""

from datetime import date, time

from models import Appointment, Center, DoctorWeeklyHours
from utils.datetime_utils import CLINIC_TZ


class TestAppointmentModel:
    """Test Appointment properties."""

    def _appointment(self, **kwargs):
        fields = dict(
            id=7, doctor_id=1, patient_id=2, date=date(2026, 3, 2), time=time(9, 30),
            duration_minutes=30, appointment_type="consultation", visit_kind="clinic", status="scheduled",
        )
        fields.update(kwargs)
        return Appointment(**fields)

    def test_time_str(self):
        assert self._appointment().time_str == "09:30"

    def test_starts_at_is_clinic_aware(self):
        starts_at = self._appointment().starts_at

        assert starts_at.tzinfo is CLINIC_TZ
        assert (starts_at.date(), starts_at.time()) == (date(2026, 3, 2), time(9, 30))
        assert starts_at.utcoffset() == CLINIC_TZ.utcoffset(None)

    def test_repr(self):
        assert repr(self._appointment()) == "<Appointment(id=7, doctor_id=1, 2026-03-02 09:30, status='scheduled')>"

    def test_live_slot_index(self):
        index = next(i for i in Appointment.__table__.indexes if i.name == "uq_appointments_doctor_slot")

        assert index.unique
        assert [c.name for c in index.columns] == ["doctor_id", "date", "time"]
        assert "cancelled" in str(index.dialect_options["postgresql"]["where"])
        assert "no_show" in str(index.dialect_options["sqlite"]["where"])


class TestScheduleModels:
    """Test the schedule-related models."""

    def test_weekly_hours_day_name(self):
        hours = DoctorWeeklyHours(doctor_id=1, day_of_week=1, start_time=time(9), end_time=time(17))

        assert hours.day_name == "monday"
        assert "monday" in repr(hours)

    def test_center_repr(self):
        assert repr(Center(id=3, name="North")) == "<Center(id=3, name='North')>"
