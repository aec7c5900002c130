from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from datetime import date, time, datetime
from app.models.appointment import AppointmentStatus
from app.models.profile import UserRole


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment (always created as pending)"""
    pet_owner_id: str = Field(..., min_length=1, max_length=36, description="Profile id of the pet owner")
    vet_id: str = Field(..., min_length=1, max_length=36, description="Profile id of the veterinarian")
    pet_name: str = Field(..., min_length=1, max_length=255, description="Name of the pet")
    pet_type: str = Field(..., min_length=1, max_length=100, description="Species / type of the pet")
    appointment_date: date = Field(..., description="Calendar day of the appointment (YYYY-MM-DD)")
    appointment_time: time = Field(..., description="Local time of day (HH:MM)")
    reason: str = Field(..., min_length=1, description="Reason for the visit")
    consultation_type: Optional[str] = Field(None, max_length=50, description="e.g. general, sports_training")
    duration_minutes: Optional[int] = Field(None, gt=0, le=480)
    timezone: Optional[str] = Field(None, description="IANA timezone of the local time; clinic default if omitted")
    notes: Optional[str] = None

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        if v is None:
            return v
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v


class AppointmentStatusUpdate(BaseModel):
    """Schema for requesting a status transition"""
    status: AppointmentStatus = Field(..., description="Requested new status")
    actor_role: UserRole = Field(..., description="Who is requesting the change (vet or pet_owner)")


class AppointmentResponse(BaseModel):
    id: str
    pet_owner_id: str
    vet_id: str
    pet_name: str
    pet_type: str
    reason: str
    consultation_type: Optional[str] = None
    appointment_date: date
    appointment_time: time
    timezone: str
    starts_at: datetime
    duration_minutes: int
    status: AppointmentStatus
    reminder_windows: List[str] = Field(default_factory=list, description="Reminder windows already fired")
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator('reminder_windows', mode='before')
    @classmethod
    def window_names(cls, v):
        return [getattr(w, "value", w) for w in v or []]


class DeliveryResponse(BaseModel):
    recipient_id: str
    recipient_role: str
    channel: str
    delivered: bool
    error: Optional[str] = None


class TransitionResponse(BaseModel):
    """Schema for a successful status change"""
    message: str
    previous_status: AppointmentStatus
    appointment: AppointmentResponse
    notifications: List[DeliveryResponse]
