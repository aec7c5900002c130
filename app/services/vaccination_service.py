"""
Vaccination schedule records and the vaccination reminder scan.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.clock import local_date
from app.core.config import settings
from app.core.exceptions import NotFound
from app.models.profile import Profile, UserRole
from app.models.vaccination import VaccinationRecord, VaccinationStatus
from app.services import templates
from app.services.contact_preferences import ChannelSelection, owner_intents
from app.services.notification_gateway import NotificationGateway
from app.services.reminder_scanner import ScanSummary

logger = logging.getLogger(__name__)

VACCINATION_WINDOW = "vaccination"
EMAIL_ONLY = ChannelSelection(sms=False, email=True)


class VaccinationService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, owner_id: str, pet_name: str, vaccine_name: str, due_date: date,
               notes: Optional[str] = None) -> VaccinationRecord:
        owner = self.db.get(Profile, owner_id)
        if owner is None or owner.role != UserRole.PET_OWNER:
            raise NotFound("Pet owner", owner_id)
        record = VaccinationRecord(
            pet_owner_id=owner_id,
            pet_name=pet_name,
            vaccine_name=vaccine_name,
            due_date=due_date,
            status=VaccinationStatus.PENDING,
            reminder_sent=False,
            notes=notes,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def get(self, record_id: str) -> VaccinationRecord:
        record = self.db.get(VaccinationRecord, record_id)
        if record is None:
            raise NotFound("Vaccination record", record_id)
        return record

    def list_for_owner(self, owner_id: str) -> List[VaccinationRecord]:
        return (
            self.db.query(VaccinationRecord)
            .filter(VaccinationRecord.pet_owner_id == owner_id)
            .order_by(VaccinationRecord.due_date.asc())
            .all()
        )

    def complete(self, record_id: str) -> VaccinationRecord:
        record = self.get(record_id)
        record.status = VaccinationStatus.COMPLETED
        self.db.commit()
        self.db.refresh(record)
        return record


class VaccinationReminderScanner:
    """
    Emails owners about pending vaccinations due within the lookahead.

    reminder_sent is claimed with a conditional false -> true update before
    sending. With retry_on_failure (the default) a failed email releases the
    claim so the next run tries again; without it the claim stands and a
    failed reminder is dropped.
    """

    def __init__(self, db: Session, gateway: NotificationGateway,
                 lookahead_days: Optional[int] = None,
                 retry_on_failure: Optional[bool] = None,
                 timezone: Optional[str] = None):
        self.db = db
        self.gateway = gateway
        self.lookahead = timedelta(days=lookahead_days if lookahead_days is not None
                                   else settings.vaccination_lookahead_days)
        self.retry_on_failure = (settings.vaccination_reminder_retry_on_failure
                                 if retry_on_failure is None else retry_on_failure)
        self.timezone = timezone or settings.clinic_timezone

    def find_candidates(self, now: datetime) -> List[VaccinationRecord]:
        today = local_date(now, self.timezone)
        return (
            self.db.query(VaccinationRecord)
            .options(joinedload(VaccinationRecord.pet_owner))
            .filter(
                VaccinationRecord.status == VaccinationStatus.PENDING,
                VaccinationRecord.reminder_sent.is_(False),
                VaccinationRecord.due_date >= today,
                VaccinationRecord.due_date <= today + self.lookahead,
            )
            .order_by(VaccinationRecord.due_date.asc())
            .populate_existing()
            .all()
        )

    def _claim(self, record_id: str) -> bool:
        updated = (
            self.db.query(VaccinationRecord)
            .filter(VaccinationRecord.id == record_id, VaccinationRecord.reminder_sent.is_(False))
            .update({VaccinationRecord.reminder_sent: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1

    def _release(self, record_id: str) -> None:
        (
            self.db.query(VaccinationRecord)
            .filter(VaccinationRecord.id == record_id, VaccinationRecord.reminder_sent.is_(True))
            .update({VaccinationRecord.reminder_sent: False}, synchronize_session=False)
        )
        self.db.commit()

    def scan(self, now: datetime) -> ScanSummary:
        summary = ScanSummary(window=VACCINATION_WINDOW)
        candidates = self.find_candidates(now)
        summary.candidates_scanned = len(candidates)
        logger.info(f"[Vaccinations] Found {len(candidates)} vaccination(s) due")

        for record in candidates:
            try:
                if not self._claim(record.id):
                    summary.skipped += 1
                    continue
            except SQLAlchemyError as e:
                self.db.rollback()
                summary.failed += 1
                logger.error(f"[Vaccinations] Could not claim {record.id}: {e}")
                continue

            try:
                self._send(record, summary)
            except Exception as e:
                self.db.rollback()
                summary.failed += 1
                logger.error(f"[Vaccinations] Unexpected error on record {record.id}: {e}", exc_info=True)
                self._release_after_failure(record.id)

        logger.info(
            f"[Vaccinations] Done: scanned={summary.candidates_scanned}, reminded={summary.reminders_sent}, "
            f"skipped={summary.skipped}, failed={summary.failed}"
        )
        return summary

    def _send(self, record: VaccinationRecord, summary: ScanSummary) -> None:
        owner = record.pet_owner
        logger.info(f"[Vaccinations] Sending reminder to {owner.email} for {record.pet_name}")
        message = templates.vaccination_reminder(record, owner)
        report = self.gateway.dispatch(owner_intents(owner, EMAIL_ONLY, message))

        if report.any_delivered:
            summary.reminders_sent += 1
            summary.messages_sent += report.delivered
            return

        summary.failed += 1
        self._release_after_failure(record.id)

    def _release_after_failure(self, record_id: str) -> None:
        if not self.retry_on_failure:
            logger.warning(f"[Vaccinations] Reminder for {record_id} failed; not retried")
            return
        try:
            self._release(record_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[Vaccinations] Could not release {record_id} for retry: {e}")
            return
        logger.warning(f"[Vaccinations] Reminder for {record_id} failed; will retry next run")
