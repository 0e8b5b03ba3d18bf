# Package initialization
# Import all models to ensure relationships are properly established
from .doctor import Doctor
from .doctor_weekly_hours import DoctorWeeklyHours
from .doctor_vacation import DoctorVacation
from .center import Center
from .doctor_center_assignment import DoctorCenterAssignment
from .doctor_schedule import DoctorSchedule
from .schedule_override import ScheduleOverride
from .patient import Patient
from .appointment import Appointment

__all__ = [
    "Doctor",
    "DoctorWeeklyHours",
    "DoctorVacation",
    "Center",
    "DoctorCenterAssignment",
    "DoctorSchedule",
    "ScheduleOverride",
    "Patient",
    "Appointment",
]
