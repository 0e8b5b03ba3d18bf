"""
Authenticated caller identity.

Issued by the external auth service and decoded from the bearer token in
`auth.dependencies`. Services only look at `role` (cancellation reason) and
the API layer uses `id` for ownership checks.
"""

from dataclasses import dataclass

from core.constants import ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT


@dataclass(frozen=True)
class Principal:
    """The user making a request."""
    id: int
    role: str  # "patient", "doctor" or "admin"

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_doctor(self) -> bool:
        return self.role == ROLE_DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == ROLE_PATIENT
