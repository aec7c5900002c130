from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.clock import local_date, utcnow
from app.core.config import settings
from app.core.database import get_db
from app.models.vaccination import VaccinationRecord
from app.schemas.vaccination import VaccinationCreate, VaccinationResponse
from app.services.vaccination_service import VaccinationService

router = APIRouter(prefix="/api/vaccinations", tags=["Vaccinations"])


def _to_response(record: VaccinationRecord) -> VaccinationResponse:
    response = VaccinationResponse.model_validate(record)
    today = local_date(utcnow(), settings.clinic_timezone)
    return response.model_copy(update={"status": record.effective_status(today)})


@router.post("", response_model=VaccinationResponse, status_code=status.HTTP_201_CREATED)
def create_vaccination(data: VaccinationCreate, db: Session = Depends(get_db)):
    """Add a vaccination due date for an owner's pet"""
    record = VaccinationService(db).create(
        owner_id=data.pet_owner_id,
        pet_name=data.pet_name,
        vaccine_name=data.vaccine_name,
        due_date=data.due_date,
        notes=data.notes,
    )
    return _to_response(record)


@router.get("", response_model=List[VaccinationResponse])
def list_vaccinations(
    owner_id: str = Query(..., description="Pet owner profile id"),
    db: Session = Depends(get_db),
):
    """List an owner's vaccination schedule; overdue is derived from the due date"""
    return [_to_response(r) for r in VaccinationService(db).list_for_owner(owner_id)]


@router.post("/{record_id}/complete", response_model=VaccinationResponse)
def complete_vaccination(record_id: str, db: Session = Depends(get_db)):
    return _to_response(VaccinationService(db).complete(record_id))
