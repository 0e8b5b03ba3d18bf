"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_NOTES_LENGTH = 1000

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite) - localhost
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Slot generation
DEFAULT_SLOT_DURATION_MINUTES = 30  # Doctor-level default when nothing more specific is set
DEFAULT_APPOINTMENT_DURATION_MINUTES = 30
MAX_AVAILABLE_DATES_RANGE_DAYS = 31

# Cancellation policy
CANCELLATION_WINDOW_HOURS = 24  # Patients/doctors cannot cancel closer than this to the start
ABSENCE_CANCELLATION_REASON = "absent"

# Appointment statuses
STATUS_SCHEDULED = "scheduled"
STATUS_CONFIRMED = "confirmed"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
STATUS_NO_SHOW = "no_show"

APPOINTMENT_STATUSES = [
    STATUS_SCHEDULED,
    STATUS_CONFIRMED,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
    STATUS_NO_SHOW,
]

# Appointments in these statuses no longer hold their time slot
SLOT_RELEASING_STATUSES = (STATUS_CANCELLED, STATUS_NO_SHOW, STATUS_COMPLETED)

# Statuses picked up by the absence sweep
SWEEPABLE_STATUSES = (STATUS_SCHEDULED, STATUS_CONFIRMED)

# Appointment types
APPOINTMENT_TYPES = ["consultation", "follow_up", "emergency", "routine"]

# Visit kinds
VISIT_KIND_CLINIC = "clinic"
VISIT_KIND_HOME = "home"
VISIT_KINDS = [VISIT_KIND_CLINIC, VISIT_KIND_HOME]

# Principal roles issued by the auth service
ROLE_PATIENT = "patient"
ROLE_DOCTOR = "doctor"
ROLE_ADMIN = "admin"
ROLES = [ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN]

# Weekday names, index matches stored day_of_week (0=Sunday)
WEEKDAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
