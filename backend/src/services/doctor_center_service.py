"""
Doctor-center assignment service.

This module contains business logic for managing which centers a doctor works
at, including the single primary center per doctor.
"""

import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from models import Center, Doctor, DoctorCenterAssignment

logger = logging.getLogger(__name__)


class DoctorCenterService:
    """
    Service class for doctor-center assignment operations.
    """

    @staticmethod
    def get_assignments_for_doctor(db: Session, doctor_id: int) -> List[DoctorCenterAssignment]:
        """
        Get all center assignments of a doctor, primary first.

        Args:
            db: Database session
            doctor_id: Doctor ID

        Returns:
            List of DoctorCenterAssignment objects
        """
        return db.query(DoctorCenterAssignment).filter(
            DoctorCenterAssignment.doctor_id == doctor_id
        ).order_by(DoctorCenterAssignment.is_primary.desc(), DoctorCenterAssignment.center_id).all()

    @staticmethod
    def get_primary_center(db: Session, doctor_id: int) -> Optional[Center]:
        """
        Get the doctor's primary center, if any.

        Args:
            db: Database session
            doctor_id: Doctor ID

        Returns:
            Center or None
        """
        assignment = db.query(DoctorCenterAssignment).filter(
            DoctorCenterAssignment.doctor_id == doctor_id,
            DoctorCenterAssignment.is_primary == True  # noqa: E712
        ).first()
        return assignment.center if assignment else None

    @staticmethod
    def assign(
        db: Session,
        doctor_id: int,
        center_id: int,
        is_primary: bool = False
    ) -> DoctorCenterAssignment:
        """
        Assign a doctor to a center, or update an existing assignment.

        When `is_primary` is set, every other assignment of the doctor is
        unset in the same transaction so the doctor keeps a single primary.

        Args:
            db: Database session
            doctor_id: Doctor ID
            center_id: Center ID
            is_primary: Mark this center as the doctor's primary center

        Returns:
            The DoctorCenterAssignment

        Raises:
            NotFoundError: If doctor or center not found
        """
        if db.get(Doctor, doctor_id) is None:
            raise NotFoundError(f"Doctor {doctor_id} not found")
        if db.get(Center, center_id) is None:
            raise NotFoundError(f"Center {center_id} not found")

        try:
            if is_primary:
                db.execute(
                    update(DoctorCenterAssignment)
                    .where(
                        DoctorCenterAssignment.doctor_id == doctor_id,
                        DoctorCenterAssignment.center_id != center_id,
                    )
                    .values(is_primary=False)
                    .execution_options(synchronize_session="fetch")
                )

            assignment = db.query(DoctorCenterAssignment).filter(
                DoctorCenterAssignment.doctor_id == doctor_id,
                DoctorCenterAssignment.center_id == center_id
            ).first()

            if assignment:
                assignment.is_primary = is_primary
            else:
                assignment = DoctorCenterAssignment(
                    doctor_id=doctor_id,
                    center_id=center_id,
                    is_primary=is_primary
                )
                db.add(assignment)

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(assignment)
        logger.info(f"Assigned doctor {doctor_id} to center {center_id} (primary={is_primary})")
        return assignment

    @staticmethod
    def remove_assignment(db: Session, doctor_id: int, center_id: int) -> None:
        """
        Remove a doctor's assignment to a center.

        Raises:
            NotFoundError: If assignment not found
        """
        assignment = db.query(DoctorCenterAssignment).filter(
            DoctorCenterAssignment.doctor_id == doctor_id,
            DoctorCenterAssignment.center_id == center_id
        ).first()

        if not assignment:
            raise NotFoundError(f"Doctor {doctor_id} is not assigned to center {center_id}")

        db.delete(assignment)
        db.commit()

        logger.info(f"Removed assignment of doctor {doctor_id} from center {center_id}")
