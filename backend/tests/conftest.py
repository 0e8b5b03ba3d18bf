"""
Test configuration and shared fixtures for the scheduling test suite.

Uses an in-memory SQLite database created from the model metadata. Every test
gets a fresh engine, so no state leaks between tests. The partial unique index
on live (doctor, date, time) appointments is created for SQLite too, which lets
the double-booking tests exercise the real database constraint.

Seed helpers are plain functions so tests can import them:

    from tests.conftest import create_doctor, create_patient
"""

from datetime import date, datetime
from typing import Any, Dict, Generator, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base
from models import (
    Appointment, Center, Doctor, DoctorCenterAssignment, DoctorSchedule, DoctorVacation,
    DoctorWeeklyHours, Patient, ScheduleOverride,
)
from repositories import SqlAlchemyAppointmentRepository, SqlAlchemyScheduleRepository
from services.jwt_service import TokenPayload, jwt_service
from utils.datetime_utils import FixedClock, normalize_time


# Reference instant for time-dependent tests: Sunday 2026-03-01 08:00 clinic time
NOW = datetime(2026, 3, 1, 8, 0)
MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
WEDNESDAY = date(2026, 3, 4)
SATURDAY = date(2026, 3, 7)
SUNDAY = date(2026, 3, 8)


@pytest.fixture(scope="function")
def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # One shared connection so every session sees the same database
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session configured like the application's SessionLocal."""
    TestingSession = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = TestingSession()

    yield session

    session.close()


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def schedule_repo(db_session) -> SqlAlchemyScheduleRepository:
    return SqlAlchemyScheduleRepository(db_session)


@pytest.fixture
def appointment_repo(db_session) -> SqlAlchemyAppointmentRepository:
    return SqlAlchemyAppointmentRepository(db_session)


@pytest.fixture
def client(db_session, clock):
    """
    TestClient bound to the test session and clock.

    Dependency overrides are removed after the test.
    """
    from fastapi.testclient import TestClient

    from api.dependencies import get_clock
    from core.database import get_db
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ===== Seed helpers =====

DEFAULT_WEEKLY_HOURS: Dict[int, Dict[str, Any]] = {
    day: {"start": "09:00", "end": "17:00", "break_start": "12:00", "break_end": "13:00"}
    for day in range(1, 6)  # Monday to Friday, 0=Sunday
}


def create_doctor(
    db: Session,
    full_name: str = "Dr. Test",
    slot_duration_minutes: int = 30,
    home_visits_available: bool = False,
    weekly_hours: Optional[Dict[int, Dict[str, Any]]] = None,
    is_active: bool = True,
) -> Doctor:
    """
    Create a doctor with weekly hours.

    Defaults to Monday-Friday 09:00-17:00 with a 12:00-13:00 break. Pass an
    empty dict for a doctor without weekly hours.
    """
    doctor = Doctor(
        full_name=full_name,
        slot_duration_minutes=slot_duration_minutes,
        home_visits_available=home_visits_available,
        is_active=is_active,
    )
    db.add(doctor)
    db.flush()

    hours = DEFAULT_WEEKLY_HOURS if weekly_hours is None else weekly_hours
    for day_of_week, entry in hours.items():
        db.add(DoctorWeeklyHours(
            doctor_id=doctor.id,
            day_of_week=day_of_week,
            start_time=normalize_time(entry["start"]),
            end_time=normalize_time(entry["end"]),
            break_start=normalize_time(entry["break_start"]) if entry.get("break_start") else None,
            break_end=normalize_time(entry["break_end"]) if entry.get("break_end") else None,
            is_working=entry.get("is_working", True),
        ))
    db.commit()
    return doctor


def create_patient(db: Session, full_name: str = "Test Patient", phone_number: str = "0912345678") -> Patient:
    patient = Patient(full_name=full_name, phone_number=phone_number)
    db.add(patient)
    db.commit()
    return patient


def create_center(db: Session, name: str = "Main Center", is_active: bool = True) -> Center:
    center = Center(
        name=name,
        operating_hours={
            "monday": {"open": "08:00", "close": "18:00"},
            "tuesday": {"open": "08:00", "close": "18:00"},
            "wednesday": {"open": "08:00", "close": "18:00"},
            "thursday": {"open": "08:00", "close": "18:00"},
            "friday": {"open": "08:00", "close": "18:00"},
            "saturday": None,
            "sunday": None,
        },
        is_active=is_active,
    )
    db.add(center)
    db.commit()
    return center


def assign_doctor_to_center(
    db: Session, doctor: Doctor, center: Center, is_primary: bool = False
) -> DoctorCenterAssignment:
    assignment = DoctorCenterAssignment(doctor_id=doctor.id, center_id=center.id, is_primary=is_primary)
    db.add(assignment)
    db.commit()
    return assignment


def create_doctor_schedule(
    db: Session,
    doctor: Doctor,
    center: Center,
    day_of_week: int,
    slots: List[Dict[str, Any]],
    slot_duration: int = 30,
    is_available: bool = True,
) -> DoctorSchedule:
    schedule = DoctorSchedule(
        doctor_id=doctor.id,
        center_id=center.id,
        day_of_week=day_of_week,
        slot_duration=slot_duration,
        slots=slots,
        is_available=is_available,
    )
    db.add(schedule)
    db.commit()
    return schedule


def create_override(
    db: Session,
    doctor: Doctor,
    day: date,
    windows: List[Dict[str, Any]],
    reason: Optional[str] = None,
) -> ScheduleOverride:
    override = ScheduleOverride(doctor_id=doctor.id, date=day, windows=windows, reason=reason)
    db.add(override)
    db.commit()
    return override


def create_vacation(
    db: Session, doctor: Doctor, start_date: date, end_date: Optional[date] = None
) -> DoctorVacation:
    vacation = DoctorVacation(doctor_id=doctor.id, start_date=start_date, end_date=end_date or start_date)
    db.add(vacation)
    db.commit()
    return vacation


def create_appointment(
    db: Session,
    doctor: Doctor,
    patient: Patient,
    day: date,
    at: str,
    status: str = "scheduled",
    duration_minutes: int = 30,
    center: Optional[Center] = None,
    visit_kind: str = "clinic",
    appointment_type: str = "consultation",
    notes: Optional[str] = None,
) -> Appointment:
    """Insert an appointment directly, bypassing the booking rules."""
    appointment = Appointment(
        doctor_id=doctor.id,
        patient_id=patient.id,
        center_id=center.id if center else None,
        date=day,
        time=normalize_time(at),
        duration_minutes=duration_minutes,
        appointment_type=appointment_type,
        visit_kind=visit_kind,
        status=status,
        notes=notes,
    )
    db.add(appointment)
    db.commit()
    return appointment


def auth_headers(user_id: int, role: str) -> Dict[str, str]:
    """Bearer header for a principal, signed with the configured secret."""
    token = jwt_service.create_access_token(TokenPayload(user_id=user_id, role=role))
    return {"Authorization": f"Bearer {token}"}
