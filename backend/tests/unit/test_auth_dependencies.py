"""
Tests for authentication dependencies and ownership checks.
"""

import pytest
from datetime import date, time
from unittest.mock import patch
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from auth.dependencies import (
    get_current_principal, get_token_payload, require_admin_role, require_staff_role,
)
from auth.permissions import (
    ensure_can_access_appointment, ensure_can_book_for, scope_listing_filters,
)
from models import Appointment
from services.jwt_service import TokenPayload
from shared_types import Principal


PATIENT = Principal(id=10, role="patient")
DOCTOR = Principal(id=20, role="doctor")
ADMIN = Principal(id=1, role="admin")


def _appointment(patient_id=10, doctor_id=20):
    return Appointment(
        id=1,
        doctor_id=doctor_id,
        patient_id=patient_id,
        date=date(2026, 3, 2),
        time=time(10, 0),
        duration_minutes=30,
        appointment_type="consultation",
        visit_kind="clinic",
        status="scheduled",
    )


class TestPrincipal:
    def test_role_properties(self):
        assert PATIENT.is_patient and not PATIENT.is_doctor and not PATIENT.is_admin
        assert DOCTOR.is_doctor and not DOCTOR.is_patient
        assert ADMIN.is_admin


class TestGetTokenPayload:
    """Test get_token_payload dependency."""

    @patch('auth.dependencies.jwt_service')
    def test_valid_token(self, mock_jwt_service):
        """Test extracting payload from valid token."""
        payload = TokenPayload(user_id=10, role="patient")
        mock_jwt_service.verify_token.return_value = payload
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="token")

        assert get_token_payload(credentials) == payload
        mock_jwt_service.verify_token.assert_called_once_with("token")

    def test_no_credentials(self):
        assert get_token_payload(None) is None


class TestGetCurrentPrincipal:
    """Test get_current_principal dependency."""

    def test_valid_payload(self):
        principal = get_current_principal(TokenPayload(user_id=20, role="doctor"))

        assert principal == DOCTOR

    def test_missing_payload_is_unauthorized(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_principal(None)

        assert exc_info.value.status_code == 401

    def test_unknown_role_is_forbidden(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_principal(TokenPayload(user_id=3, role="receptionist"))

        assert exc_info.value.status_code == 403


class TestRoleGuards:
    """Test require_admin_role and require_staff_role."""

    def test_admin_guard(self):
        assert require_admin_role(ADMIN) == ADMIN
        for principal in (PATIENT, DOCTOR):
            with pytest.raises(HTTPException) as exc_info:
                require_admin_role(principal)
            assert exc_info.value.status_code == 403

    def test_staff_guard(self):
        assert require_staff_role(DOCTOR) == DOCTOR
        assert require_staff_role(ADMIN) == ADMIN
        with pytest.raises(HTTPException) as exc_info:
            require_staff_role(PATIENT)
        assert exc_info.value.status_code == 403


class TestOwnership:
    """Test appointment ownership checks."""

    def test_patient_books_for_self_only(self):
        ensure_can_book_for(PATIENT, patient_id=10, doctor_id=99)
        with pytest.raises(HTTPException) as exc_info:
            ensure_can_book_for(PATIENT, patient_id=11, doctor_id=99)
        assert exc_info.value.status_code == 403

    def test_doctor_books_with_self_only(self):
        ensure_can_book_for(DOCTOR, patient_id=42, doctor_id=20)
        with pytest.raises(HTTPException):
            ensure_can_book_for(DOCTOR, patient_id=42, doctor_id=21)

    def test_admin_books_for_anyone(self):
        ensure_can_book_for(ADMIN, patient_id=42, doctor_id=21)

    def test_access_own_appointment(self):
        ensure_can_access_appointment(PATIENT, _appointment())
        ensure_can_access_appointment(DOCTOR, _appointment())
        ensure_can_access_appointment(ADMIN, _appointment(patient_id=1, doctor_id=2))

    def test_access_other_appointment_is_forbidden(self):
        for principal in (PATIENT, DOCTOR):
            with pytest.raises(HTTPException) as exc_info:
                ensure_can_access_appointment(principal, _appointment(patient_id=11, doctor_id=21))
            assert exc_info.value.status_code == 403


class TestScopeListingFilters:
    """Test narrowing of list filters to what the principal may see."""

    def test_admin_filters_unchanged(self):
        assert scope_listing_filters(ADMIN, 3, None) == (3, None)

    def test_patient_forced_to_own_id(self):
        assert scope_listing_filters(PATIENT, None, None) == (None, 10)
        assert scope_listing_filters(PATIENT, 20, 10) == (20, 10)

    def test_patient_other_patient_forbidden(self):
        with pytest.raises(HTTPException):
            scope_listing_filters(PATIENT, None, 11)

    def test_doctor_forced_to_own_id(self):
        assert scope_listing_filters(DOCTOR, None, 10) == (20, 10)

    def test_doctor_other_doctor_forbidden(self):
        with pytest.raises(HTTPException):
            scope_listing_filters(DOCTOR, 21, None)
