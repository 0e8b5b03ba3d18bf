"""
Alembic environment configuration for the clinic scheduling backend.

This module configures Alembic to use the application's database settings
and SQLAlchemy models for migration autogeneration.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

# Import settings to get database URL
from core.config import DATABASE_URL

# Import Base and all models for autogenerate support
from core.database import Base
from models import (  # noqa: F401
    Appointment,
    Center,
    Doctor,
    DoctorCenterAssignment,
    DoctorSchedule,
    DoctorVacation,
    DoctorWeeklyHours,
    Patient,
    ScheduleOverride,
)

config = context.config

# An explicit sqlalchemy.url (alembic.ini or -x override) wins over DATABASE_URL
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Configures the context with just a URL, so no DBAPI is needed. The
    migration SQL is emitted to the script output.
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            transaction_per_migration=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
