from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentStatusUpdate,
    AppointmentResponse,
    DeliveryResponse,
    TransitionResponse,
)
from app.schemas.contact_preference import (
    ContactPreferenceUpdate,
    ContactPreferenceResponse,
    NotificationCheckResponse,
)
from app.schemas.vaccination import VaccinationCreate, VaccinationResponse
from app.schemas.reminder import ScanSummaryResponse

__all__ = [
    "AppointmentCreate",
    "AppointmentStatusUpdate",
    "AppointmentResponse",
    "DeliveryResponse",
    "TransitionResponse",
    "ContactPreferenceUpdate",
    "ContactPreferenceResponse",
    "NotificationCheckResponse",
    "VaccinationCreate",
    "VaccinationResponse",
    "ScanSummaryResponse",
]
