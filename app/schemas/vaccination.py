from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import date, datetime
from app.models.vaccination import VaccinationStatus


class VaccinationCreate(BaseModel):
    pet_owner_id: str = Field(..., min_length=1, max_length=36)
    pet_name: str = Field(..., min_length=1, max_length=255)
    vaccine_name: str = Field(..., min_length=1, max_length=255)
    due_date: date
    notes: Optional[str] = None


class VaccinationResponse(BaseModel):
    id: str
    pet_owner_id: str
    pet_name: str
    vaccine_name: str
    due_date: date
    status: VaccinationStatus = Field(..., description="pending, completed, or overdue (derived)")
    reminder_sent: bool
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
