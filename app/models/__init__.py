from app.models.profile import Profile, PetOwnerProfile, UserRole, ContactMethod
from app.models.appointment import Appointment, AppointmentStatus, ReminderWindow
from app.models.vaccination import VaccinationRecord, VaccinationStatus

__all__ = [
    "Profile",
    "PetOwnerProfile",
    "UserRole",
    "ContactMethod",
    "Appointment",
    "AppointmentStatus",
    "ReminderWindow",
    "VaccinationRecord",
    "VaccinationStatus",
]
