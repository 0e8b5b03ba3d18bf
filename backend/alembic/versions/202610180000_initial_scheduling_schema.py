"""Initial scheduling schema baseline

Revision ID: 202610180000
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '202610180000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Live appointments hold their slot; these statuses release it
LIVE_SLOT_PREDICATE = "status NOT IN ('cancelled', 'no_show', 'completed')"


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('doctors',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('full_name', sa.String(length=255), nullable=False),
    sa.Column('slot_duration_minutes', sa.Integer(), nullable=False),
    sa.Column('home_visits_available', sa.Boolean(), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_doctors_id'), 'doctors', ['id'], unique=False)

    op.create_table('patients',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('full_name', sa.String(length=255), nullable=False),
    sa.Column('phone_number', sa.String(length=50), nullable=True),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_patients_id'), 'patients', ['id'], unique=False)

    op.create_table('centers',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('operating_hours', sa.JSON(), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_centers_id'), 'centers', ['id'], unique=False)

    op.create_table('doctor_weekly_hours',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('doctor_id', sa.Integer(), nullable=False),
    sa.Column('day_of_week', sa.Integer(), nullable=False),  # 0=Sunday
    sa.Column('start_time', sa.Time(), nullable=False),
    sa.Column('end_time', sa.Time(), nullable=False),
    sa.Column('break_start', sa.Time(), nullable=True),
    sa.Column('break_end', sa.Time(), nullable=True),
    sa.Column('is_working', sa.Boolean(), nullable=False),
    *_timestamps(),
    sa.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='check_weekly_hours_day_of_week'),
    sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('doctor_id', 'day_of_week', name='uq_doctor_weekly_hours_day')
    )
    op.create_index(op.f('ix_doctor_weekly_hours_id'), 'doctor_weekly_hours', ['id'], unique=False)

    op.create_table('doctor_vacations',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('doctor_id', sa.Integer(), nullable=False),
    sa.Column('start_date', sa.Date(), nullable=False),
    sa.Column('end_date', sa.Date(), nullable=False),
    sa.Column('reason', sa.String(length=255), nullable=True),
    *_timestamps(),
    sa.CheckConstraint('end_date >= start_date', name='check_vacation_range'),
    sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_doctor_vacations_id'), 'doctor_vacations', ['id'], unique=False)
    op.create_index('idx_doctor_vacations_doctor_dates', 'doctor_vacations', ['doctor_id', 'start_date', 'end_date'], unique=False)

    op.create_table('doctor_center_assignments',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('doctor_id', sa.Integer(), nullable=False),
    sa.Column('center_id', sa.Integer(), nullable=False),
    sa.Column('is_primary', sa.Boolean(), nullable=False),
    *_timestamps(),
    sa.ForeignKeyConstraint(['center_id'], ['centers.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('doctor_id', 'center_id', name='uq_doctor_center_assignment')
    )
    op.create_index(op.f('ix_doctor_center_assignments_id'), 'doctor_center_assignments', ['id'], unique=False)

    op.create_table('doctor_schedules',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('doctor_id', sa.Integer(), nullable=False),
    sa.Column('center_id', sa.Integer(), nullable=False),
    sa.Column('day_of_week', sa.Integer(), nullable=False),  # 0=Sunday
    sa.Column('slot_duration', sa.Integer(), nullable=False),
    sa.Column('slots', sa.JSON(), nullable=False),
    sa.Column('is_available', sa.Boolean(), nullable=False),
    *_timestamps(),
    sa.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='check_doctor_schedule_day_of_week'),
    sa.ForeignKeyConstraint(['center_id'], ['centers.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('doctor_id', 'center_id', 'day_of_week', name='uq_doctor_schedule_center_day')
    )
    op.create_index(op.f('ix_doctor_schedules_id'), 'doctor_schedules', ['id'], unique=False)

    op.create_table('schedule_overrides',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('doctor_id', sa.Integer(), nullable=False),
    sa.Column('date', sa.Date(), nullable=False),
    sa.Column('windows', sa.JSON(), nullable=False),
    sa.Column('reason', sa.String(length=255), nullable=True),
    *_timestamps(),
    sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('doctor_id', 'date', name='uq_schedule_override_doctor_date')
    )
    op.create_index(op.f('ix_schedule_overrides_id'), 'schedule_overrides', ['id'], unique=False)

    op.create_table('appointments',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('doctor_id', sa.Integer(), nullable=False),
    sa.Column('patient_id', sa.Integer(), nullable=False),
    sa.Column('center_id', sa.Integer(), nullable=True),
    sa.Column('date', sa.Date(), nullable=False),
    sa.Column('time', sa.Time(), nullable=False),
    sa.Column('duration_minutes', sa.Integer(), nullable=False),
    sa.Column('appointment_type', sa.String(length=50), nullable=False),
    sa.Column('visit_kind', sa.String(length=20), nullable=False),
    sa.Column('status', sa.String(length=50), nullable=False),
    sa.Column('cancellation_reason', sa.String(length=255), nullable=True),
    sa.Column('notes', sa.String(length=1000), nullable=True),
    sa.Column('fee', sa.Numeric(precision=10, scale=2), nullable=True),
    sa.Column('cancelled_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
    *_timestamps(),
    sa.ForeignKeyConstraint(['center_id'], ['centers.id']),
    sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id']),
    sa.ForeignKeyConstraint(['patient_id'], ['patients.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_appointments_id'), 'appointments', ['id'], unique=False)
    op.create_index('idx_appointments_doctor_date', 'appointments', ['doctor_id', 'date'], unique=False)
    op.create_index('idx_appointments_patient', 'appointments', ['patient_id'], unique=False)
    op.create_index('idx_appointments_status', 'appointments', ['status'], unique=False)
    op.create_index(
        'uq_appointments_doctor_slot',
        'appointments',
        ['doctor_id', 'date', 'time'],
        unique=True,
        postgresql_where=sa.text(LIVE_SLOT_PREDICATE),
        sqlite_where=sa.text(LIVE_SLOT_PREDICATE),
    )


def downgrade() -> None:
    op.drop_index('uq_appointments_doctor_slot', table_name='appointments')
    op.drop_index('idx_appointments_status', table_name='appointments')
    op.drop_index('idx_appointments_patient', table_name='appointments')
    op.drop_index('idx_appointments_doctor_date', table_name='appointments')
    op.drop_index(op.f('ix_appointments_id'), table_name='appointments')
    op.drop_table('appointments')
    op.drop_index(op.f('ix_schedule_overrides_id'), table_name='schedule_overrides')
    op.drop_table('schedule_overrides')
    op.drop_index(op.f('ix_doctor_schedules_id'), table_name='doctor_schedules')
    op.drop_table('doctor_schedules')
    op.drop_index(op.f('ix_doctor_center_assignments_id'), table_name='doctor_center_assignments')
    op.drop_table('doctor_center_assignments')
    op.drop_index('idx_doctor_vacations_doctor_dates', table_name='doctor_vacations')
    op.drop_index(op.f('ix_doctor_vacations_id'), table_name='doctor_vacations')
    op.drop_table('doctor_vacations')
    op.drop_index(op.f('ix_doctor_weekly_hours_id'), table_name='doctor_weekly_hours')
    op.drop_table('doctor_weekly_hours')
    op.drop_index(op.f('ix_centers_id'), table_name='centers')
    op.drop_table('centers')
    op.drop_index(op.f('ix_patients_id'), table_name='patients')
    op.drop_table('patients')
    op.drop_index(op.f('ix_doctors_id'), table_name='doctors')
    op.drop_table('doctors')
