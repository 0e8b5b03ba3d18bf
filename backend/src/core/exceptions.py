"""
Domain exceptions for the scheduling engine.

Services raise these instead of HTTP errors so the engine stays independent of
the web layer. `main.py` maps every `SchedulingError` to a JSON response using
the exception's `status_code` and machine-readable `code`.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for all scheduling errors surfaced to callers."""

    status_code: int = 500
    default_code: str = "SCHEDULING_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code='{self.code}', message='{self.message}')"


class ValidationError(SchedulingError):
    """A required field is missing or malformed."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class NotFoundError(SchedulingError):
    """Doctor, patient, center or appointment does not exist."""

    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(SchedulingError):
    """The doctor was booked concurrently; caller should refetch availability."""

    status_code = 409
    default_code = "SLOT_CONFLICT"


class PolicyViolation(SchedulingError):
    """Entities are valid but a business rule blocks the action."""

    status_code = 400
    default_code = "POLICY_VIOLATION"


class InvalidConfigError(SchedulingError):
    """Stored schedule data cannot be used (e.g. a non-positive slot duration)."""

    status_code = 500
    default_code = "INVALID_CONFIG"


# Policy violation codes
OUTSIDE_AVAILABILITY = "OUTSIDE_AVAILABILITY"
APPOINTMENT_IN_PAST = "APPOINTMENT_IN_PAST"
CANCELLATION_TOO_LATE = "CANCELLATION_TOO_LATE"
ALREADY_CANCELLED = "ALREADY_CANCELLED"
INVALID_TRANSITION = "INVALID_TRANSITION"
HOME_VISITS_UNAVAILABLE = "HOME_VISITS_UNAVAILABLE"
DOCTOR_NOT_AT_CENTER = "DOCTOR_NOT_AT_CENTER"
