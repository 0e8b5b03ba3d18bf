"""
Appointment lifecycle management.

Every status change goes through the transition table below, including the
absence sweep that cancels appointments whose start time has passed.

    scheduled   -> confirmed, cancelled, no_show
    confirmed   -> in_progress, completed, cancelled, no_show
    in_progress -> completed
    completed, cancelled, no_show are terminal
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.constants import (
    ABSENCE_CANCELLATION_REASON, APPOINTMENT_STATUSES, STATUS_CANCELLED, STATUS_COMPLETED,
    STATUS_CONFIRMED, STATUS_IN_PROGRESS, STATUS_NO_SHOW, STATUS_SCHEDULED, SWEEPABLE_STATUSES,
)
from core.exceptions import INVALID_TRANSITION, NotFoundError, PolicyViolation, ValidationError
from models import Appointment
from repositories.base import AppointmentRepository
from utils.datetime_utils import Clock, SystemClock

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    STATUS_SCHEDULED: frozenset({STATUS_CONFIRMED, STATUS_CANCELLED, STATUS_NO_SHOW}),
    STATUS_CONFIRMED: frozenset({STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW}),
    STATUS_IN_PROGRESS: frozenset({STATUS_COMPLETED}),
    STATUS_COMPLETED: frozenset(),
    STATUS_CANCELLED: frozenset(),
    STATUS_NO_SHOW: frozenset(),
}

# Called after an appointment is completed, with (appointment, diagnosis, prescription)
CompletionHook = Callable[[Appointment, Optional[str], Optional[str]], None]


@dataclass
class SweepResult:
    """Outcome of an absence sweep."""
    updated_count: int = 0
    updated_ids: List[int] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        result: Dict[str, object] = {
            "updated_count": self.updated_count,
            "updated_ids": self.updated_ids,
        }
        if self.error:
            result["error"] = self.error
        return result


def can_transition(current: str, target: str) -> bool:
    """Check if the transition table allows current -> target."""
    return target in TRANSITIONS.get(current, frozenset())


class LifecycleManager:
    """Applies status transitions to appointments."""

    def __init__(
        self,
        appointment_repository: AppointmentRepository,
        clock: Optional[Clock] = None,
        on_complete: Optional[CompletionHook] = None,
    ):
        self.appointments = appointment_repository
        self.clock = clock or SystemClock()
        self.on_complete = on_complete

    def confirm(self, appointment_id: int) -> Appointment:
        return self._transition(appointment_id, STATUS_CONFIRMED)

    def start(self, appointment_id: int) -> Appointment:
        return self._transition(appointment_id, STATUS_IN_PROGRESS)

    def complete(
        self,
        appointment_id: int,
        diagnosis: Optional[str] = None,
        prescription: Optional[str] = None,
    ) -> Appointment:
        """
        Complete an appointment and fire the completion hook.

        The hook (e.g. medical record creation) runs after the status change is
        committed; its failure does not undo the completion.
        """
        appointment = self._transition(
            appointment_id, STATUS_COMPLETED, {"completed_at": self.clock.now()}
        )
        if self.on_complete is not None:
            self.on_complete(appointment, diagnosis, prescription)
        return appointment

    def mark_no_show(self, appointment_id: int) -> Appointment:
        return self._transition(appointment_id, STATUS_NO_SHOW)

    def cancel(self, appointment_id: int, reason: str) -> Appointment:
        """Cancel without policy checks; BookingService applies the cancellation rules."""
        return self._transition(
            appointment_id,
            STATUS_CANCELLED,
            {"cancellation_reason": reason, "cancelled_at": self.clock.now()},
        )

    def update_status(
        self,
        appointment_id: int,
        status: str,
        diagnosis: Optional[str] = None,
        prescription: Optional[str] = None,
    ) -> Appointment:
        """
        Move an appointment to `status`.

        Raises:
            ValidationError: Unknown status, or "cancelled" (use the cancel operation)
            NotFoundError: No such appointment
            PolicyViolation: Transition not allowed
        """
        if status not in APPOINTMENT_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        if status == STATUS_CANCELLED:
            raise ValidationError("Use the cancel operation to cancel an appointment")

        if status == STATUS_CONFIRMED:
            return self.confirm(appointment_id)
        if status == STATUS_IN_PROGRESS:
            return self.start(appointment_id)
        if status == STATUS_COMPLETED:
            return self.complete(appointment_id, diagnosis, prescription)
        if status == STATUS_NO_SHOW:
            return self.mark_no_show(appointment_id)
        # Only "scheduled" remains, and nothing transitions back to it
        return self._transition(appointment_id, status)

    def mark_past_as_absent(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
    ) -> SweepResult:
        """
        Cancel scheduled/confirmed appointments whose start time has passed.

        The matching rows are cancelled with reason "absent" in a single
        transaction. Running the sweep again changes nothing. Storage errors
        are reported in the result instead of raised.
        """
        now = self.clock.now()
        try:
            candidates = self.appointments.find_for_sweep(
                SWEEPABLE_STATUSES, doctor_id=doctor_id, patient_id=patient_id, until=now.date()
            )
            past_ids = [a.id for a in candidates if a.starts_at < now]
            if not past_ids:
                return SweepResult()

            updated_ids = self.appointments.cancel_many(
                past_ids, ABSENCE_CANCELLATION_REASON, now, SWEEPABLE_STATUSES
            )
        except SQLAlchemyError as e:
            logger.exception(f"Absence sweep failed: {e}")
            return SweepResult(error=str(e))

        if updated_ids:
            logger.info(f"Marked {len(updated_ids)} past appointments as absent: {updated_ids}")
        return SweepResult(updated_count=len(updated_ids), updated_ids=updated_ids)

    def _transition(
        self,
        appointment_id: int,
        target: str,
        extra: Optional[Dict[str, object]] = None,
    ) -> Appointment:
        appointment = self.appointments.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")

        if not can_transition(appointment.status, target):
            logger.warning(
                f"Rejected transition {appointment.status} -> {target} for appointment {appointment_id}"
            )
            raise PolicyViolation(
                f"Cannot change status from {appointment.status} to {target}", INVALID_TRANSITION
            )

        previous = appointment.status
        patch: Dict[str, object] = {"status": target}
        if extra:
            patch.update(extra)
        updated = self.appointments.update(appointment_id, patch)
        logger.info(f"Appointment {appointment_id}: {previous} -> {target}")
        return updated
