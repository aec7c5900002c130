"""
Appointment Router
Booking, lookup and status transitions
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.core.database import get_db
from app.models.appointment import AppointmentStatus
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentStatusUpdate,
    AppointmentResponse,
    DeliveryResponse,
    TransitionResponse,
)
from app.services.appointment_service import AppointmentService
from app.services.notification_gateway import NotificationGateway, get_notification_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointment_service(
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
) -> AppointmentService:
    return AppointmentService(db, gateway)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Book a new appointment. It always starts in the pending state.

    Raises:
        404 if the owner or vet profile does not exist
    """
    appointment = service.create(
        owner_id=data.pet_owner_id,
        vet_id=data.vet_id,
        pet_name=data.pet_name,
        pet_type=data.pet_type,
        appointment_date=data.appointment_date,
        appointment_time=data.appointment_time,
        reason=data.reason,
        consultation_type=data.consultation_type,
        duration_minutes=data.duration_minutes,
        timezone=data.timezone,
        notes=data.notes,
    )
    return AppointmentResponse.model_validate(appointment)


@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    owner_id: Optional[str] = Query(None, description="Filter by pet owner"),
    vet_id: Optional[str] = Query(None, description="Filter by veterinarian"),
    appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
    service: AppointmentService = Depends(get_appointment_service),
):
    """List appointments ordered by start time"""
    appointments = service.list_appointments(owner_id=owner_id, vet_id=vet_id, status=appointment_status)
    return [AppointmentResponse.model_validate(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    return AppointmentResponse.model_validate(service.get(appointment_id))


@router.patch("/{appointment_id}/status", response_model=TransitionResponse)
def transition_appointment(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Move an appointment along pending -> confirmed -> completed, or cancel it.

    The owner and vet are notified after the change is stored. Notification
    failures are reported per recipient but do not fail the request.

    Raises:
        404 if the appointment does not exist
        409 if the requested status is not reachable from the current one
    """
    result = service.transition(appointment_id, data.status, data.actor_role)
    notifications = [
        DeliveryResponse(
            recipient_id=o.intent.recipient_id,
            recipient_role=o.intent.recipient_role,
            channel=o.intent.channel.value,
            delivered=o.delivered,
            error=o.error,
        )
        for o in result.outcomes
    ]
    return TransitionResponse(
        message=f"Appointment {data.status.value}",
        previous_status=result.previous_status,
        appointment=AppointmentResponse.model_validate(result.appointment),
        notifications=notifications,
    )
