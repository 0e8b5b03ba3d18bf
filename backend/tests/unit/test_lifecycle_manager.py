"""
Unit tests for the appointment lifecycle transition rules.

Database-backed transitions and the absence sweep are covered in
tests/integration/test_lifecycle_integration.py.
"""

import pytest
from datetime import date, datetime, time
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from core.exceptions import INVALID_TRANSITION, NotFoundError, PolicyViolation, ValidationError
from models import Appointment
from repositories.base import AppointmentRepository
from services.lifecycle_manager import TRANSITIONS, LifecycleManager, SweepResult, can_transition
from utils.datetime_utils import FixedClock


def _appointment(status="scheduled", appointment_id=1, day=date(2026, 3, 2), at=time(10, 0)):
    return Appointment(
        id=appointment_id,
        doctor_id=1,
        patient_id=1,
        date=day,
        time=at,
        duration_minutes=30,
        appointment_type="consultation",
        visit_kind="clinic",
        status=status,
    )


def _repository(appointment=None):
    repo = Mock(spec=AppointmentRepository)
    repo.find_by_id.return_value = appointment

    def apply_patch(appointment_id, patch):
        for key, value in patch.items():
            setattr(appointment, key, value)
        return appointment

    repo.update.side_effect = apply_patch
    return repo


class TestTransitionTable:
    """Test the allowed status transitions."""

    @pytest.mark.parametrize("current,target", [
        ("scheduled", "confirmed"),
        ("scheduled", "cancelled"),
        ("scheduled", "no_show"),
        ("confirmed", "in_progress"),
        ("confirmed", "completed"),
        ("confirmed", "cancelled"),
        ("confirmed", "no_show"),
        ("in_progress", "completed"),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("scheduled", "completed"),
        ("scheduled", "in_progress"),
        ("in_progress", "cancelled"),
        ("in_progress", "no_show"),
        ("confirmed", "scheduled"),
        ("completed", "cancelled"),
        ("cancelled", "scheduled"),
        ("no_show", "confirmed"),
    ])
    def test_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_terminal_statuses_have_no_exits(self):
        for status in ("completed", "cancelled", "no_show"):
            assert TRANSITIONS[status] == frozenset()

    def test_unknown_status(self):
        assert not can_transition("archived", "confirmed")


class TestTransitions:
    """Test LifecycleManager transitions against a mocked repository."""

    def test_confirm(self):
        appointment = _appointment("scheduled")
        repo = _repository(appointment)

        result = LifecycleManager(repo).confirm(1)

        assert result.status == "confirmed"
        repo.update.assert_called_once_with(1, {"status": "confirmed"})

    def test_invalid_transition_raises_policy_violation(self):
        repo = _repository(_appointment("scheduled"))

        with pytest.raises(PolicyViolation) as exc_info:
            LifecycleManager(repo).complete(1)

        assert exc_info.value.code == INVALID_TRANSITION
        repo.update.assert_not_called()

    def test_missing_appointment_raises_not_found(self):
        repo = _repository(None)

        with pytest.raises(NotFoundError):
            LifecycleManager(repo).confirm(1)

    def test_complete_sets_timestamp_and_fires_hook(self):
        clock = FixedClock(datetime(2026, 3, 2, 10, 30))
        appointment = _appointment("in_progress")
        hook = Mock()

        result = LifecycleManager(_repository(appointment), clock, on_complete=hook).complete(
            1, diagnosis="Flu", prescription="Rest"
        )

        assert result.status == "completed"
        assert result.completed_at == clock.now()
        hook.assert_called_once_with(appointment, "Flu", "Rest")

    def test_rejected_completion_does_not_fire_hook(self):
        hook = Mock()

        with pytest.raises(PolicyViolation):
            LifecycleManager(_repository(_appointment("cancelled")), on_complete=hook).complete(1)

        hook.assert_not_called()

    def test_cancel_records_reason_and_time(self):
        clock = FixedClock(datetime(2026, 3, 1, 8, 0))
        appointment = _appointment("confirmed")

        result = LifecycleManager(_repository(appointment), clock).cancel(1, "Patient request")

        assert result.status == "cancelled"
        assert result.cancellation_reason == "Patient request"
        assert result.cancelled_at == clock.now()


class TestUpdateStatus:
    """Test LifecycleManager.update_status dispatch."""

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            LifecycleManager(_repository(_appointment())).update_status(1, "archived")

    def test_cancelled_must_use_cancel_operation(self):
        with pytest.raises(ValidationError):
            LifecycleManager(_repository(_appointment())).update_status(1, "cancelled")

    def test_back_to_scheduled_is_rejected(self):
        with pytest.raises(PolicyViolation):
            LifecycleManager(_repository(_appointment("confirmed"))).update_status(1, "scheduled")

    @pytest.mark.parametrize("start,target", [
        ("scheduled", "confirmed"),
        ("confirmed", "in_progress"),
        ("in_progress", "completed"),
        ("scheduled", "no_show"),
    ])
    def test_dispatches_to_transition(self, start, target):
        appointment = _appointment(start)

        result = LifecycleManager(_repository(appointment)).update_status(1, target)

        assert result.status == target


class TestSweepErrors:
    """Test that storage errors during the sweep are reported, not raised."""

    def test_find_failure_is_reported(self):
        repo = Mock(spec=AppointmentRepository)
        repo.find_for_sweep.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        result = LifecycleManager(repo, FixedClock(datetime(2026, 3, 2, 12, 0))).mark_past_as_absent()

        assert result.updated_count == 0
        assert result.updated_ids == []
        assert result.error is not None
        repo.cancel_many.assert_not_called()

    def test_cancel_failure_is_reported(self):
        repo = Mock(spec=AppointmentRepository)
        repo.find_for_sweep.return_value = [_appointment("scheduled", at=time(9, 0))]
        repo.cancel_many.side_effect = OperationalError("UPDATE", {}, Exception("deadlock"))

        result = LifecycleManager(repo, FixedClock(datetime(2026, 3, 2, 12, 0))).mark_past_as_absent()

        assert result.updated_count == 0
        assert "deadlock" in result.error

    def test_nothing_past_skips_update(self):
        repo = Mock(spec=AppointmentRepository)
        repo.find_for_sweep.return_value = [_appointment("scheduled", at=time(15, 0))]

        result = LifecycleManager(repo, FixedClock(datetime(2026, 3, 2, 12, 0))).mark_past_as_absent()

        assert result == SweepResult()
        repo.cancel_many.assert_not_called()

    def test_future_days_are_not_loaded(self):
        repo = Mock(spec=AppointmentRepository)
        repo.find_for_sweep.return_value = []

        LifecycleManager(repo, FixedClock(datetime(2026, 3, 2, 12, 0))).mark_past_as_absent(doctor_id=4)

        _, kwargs = repo.find_for_sweep.call_args
        assert kwargs["until"] == date(2026, 3, 2)
        assert kwargs["doctor_id"] == 4


class TestSweepResult:
    def test_to_dict_omits_missing_error(self):
        assert SweepResult(updated_count=1, updated_ids=[3]).to_dict() == {"updated_count": 1, "updated_ids": [3]}

    def test_to_dict_includes_error(self):
        assert SweepResult(error="boom").to_dict()["error"] == "boom"
