"""
Reminder Router
Trigger endpoints for a hosted scheduler (cron calling over HTTP).
Each call runs one scan to completion and returns its summary.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
import hmac
import logging

from app.core.clock import utcnow
from app.core.config import settings
from app.core.database import get_db
from app.models.appointment import ReminderWindow
from app.schemas.reminder import ScanSummaryResponse
from app.services.notification_gateway import NotificationGateway, get_notification_gateway
from app.services.reminder_scanner import ReminderWindowScanner
from app.services.vaccination_service import VaccinationReminderScanner

logger = logging.getLogger(__name__)


def verify_scheduler_token(x_scheduler_token: Optional[str] = Header(None)):
    """Require X-Scheduler-Token when SCHEDULER_TOKEN is configured."""
    expected = settings.scheduler_token
    if not expected:
        return
    if not x_scheduler_token or not hmac.compare_digest(x_scheduler_token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid scheduler token",
        )


router = APIRouter(
    prefix="/api/reminders",
    tags=["Reminders"],
    dependencies=[Depends(verify_scheduler_token)],
)


def _run(scanner, label: str) -> ScanSummaryResponse:
    try:
        summary = scanner.scan(utcnow())
    except SQLAlchemyError as e:
        logger.error(f"[Reminders] {label} scan could not load candidates: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} scan failed: record store unavailable",
        )
    return ScanSummaryResponse(**summary.to_dict())


@router.post("/day-ahead", response_model=ScanSummaryResponse)
def run_day_ahead_scan(
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    """Remind owners and vets of confirmed appointments in the next 24 hours"""
    return _run(ReminderWindowScanner.for_window(db, gateway, ReminderWindow.DAY_AHEAD), "Day-ahead")


@router.post("/hour-ahead", response_model=ScanSummaryResponse)
def run_hour_ahead_scan(
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    """Remind owners and vets of confirmed appointments in the next hour"""
    return _run(ReminderWindowScanner.for_window(db, gateway, ReminderWindow.HOUR_AHEAD), "Hour-ahead")


@router.post("/vaccinations", response_model=ScanSummaryResponse)
def run_vaccination_scan(
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    """Email owners about pending vaccinations due within the lookahead"""
    return _run(VaccinationReminderScanner(db, gateway), "Vaccination")
