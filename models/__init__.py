from .department import Department, SubDepartment
from .patient import Patient, PatientEntry, PatientPhoto
from .appointment import Appointment
from .weekly_slot import WeeklySlot
from .settings import AdminAuth, BrandSettings

__all__ = [
    "Department",
    "SubDepartment",
    "Patient",
    "PatientEntry",
    "PatientPhoto",
    "Appointment",
    "WeeklySlot",
    "AdminAuth",
    "BrandSettings",
]
