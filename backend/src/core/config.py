"""
Application configuration using python-dotenv.

This module loads environment variables from .env file into os.environ
for use throughout the application.
"""

import os
import pathlib
from dotenv import load_dotenv


# Determine if we're running in a test environment
# Don't load .env file during testing to ensure predictable test behavior
is_testing = os.getenv("PYTEST_VERSION") is not None or any("pytest" in str(frame) for frame in __import__('inspect').stack(0))

# Load .env file into os.environ (only outside of testing)
if not is_testing:
    # Try multiple possible locations for .env file
    possible_paths = [
        pathlib.Path(__file__).parent.parent.parent / ".env",  # backend/.env (when run from backend/src)
        pathlib.Path(__file__).parent.parent.parent.parent / ".env",  # .env (when run from src)
        pathlib.Path.cwd() / ".env",  # .env in current directory
        pathlib.Path.cwd().parent / ".env",  # .env in parent directory
    ]

    for env_path in possible_paths:
        if env_path.exists():
            load_dotenv(env_path)
            break


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Configuration constants with defaults
# These match the environment variables defined in .env.example
def get_database_url():
    """Get the database URL from environment."""
    return os.getenv(
        "DATABASE_URL",
        "postgresql://localhost/clinic_scheduling_dev"
    )

DATABASE_URL = get_database_url()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Authentication (tokens are issued by the external auth service)
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Single clinic timezone, expressed as a fixed UTC offset
CLINIC_UTC_OFFSET_HOURS = int(os.getenv("CLINIC_UTC_OFFSET_HOURS", "0"))

# Periodic absence sweep (off by default; the sweep also runs on demand before listings)
ABSENCE_SWEEP_ENABLED = _env_bool("ABSENCE_SWEEP_ENABLED", False)
ABSENCE_SWEEP_INTERVAL_MINUTES = int(os.getenv("ABSENCE_SWEEP_INTERVAL_MINUTES", "15"))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
