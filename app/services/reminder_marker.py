"""
Reminder deduplication marker.

Each reminder window owns one bit of Appointment.reminders_sent. Writes are
single conditional UPDATE statements so overlapping scans can never both
win the same (appointment, window) pair.
"""
import enum
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.appointment import Appointment, ReminderWindow

logger = logging.getLogger(__name__)


class MarkResult(str, enum.Enum):
    MARKED = "marked"
    ALREADY_FIRED = "already_fired"
    FAILED = "failed"


class ReminderMarker:
    def __init__(self, db: Session):
        self.db = db

    def has_fired(self, appointment_id: str, window: ReminderWindow) -> bool:
        current = (
            self.db.query(Appointment.reminders_sent)
            .filter(Appointment.id == appointment_id)
            .scalar()
        )
        return bool((current or 0) & window.bit)

    def mark_fired(self, appointment_id: str, window: ReminderWindow) -> MarkResult:
        """
        Set the window bit only if it is currently clear.

        Returns MARKED when this call set it, ALREADY_FIRED when another run
        (or an earlier call) got there first, FAILED when the appointment
        does not exist or the write errored.
        """
        bit = window.bit
        try:
            updated = (
                self.db.query(Appointment)
                .filter(
                    Appointment.id == appointment_id,
                    Appointment.reminders_sent.op("&")(bit) == 0,
                )
                .update(
                    {Appointment.reminders_sent: Appointment.reminders_sent.op("|")(bit)},
                    synchronize_session=False,
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[Marker] Failed to mark {window.value} for appointment {appointment_id}: {e}")
            return MarkResult.FAILED

        if updated == 1:
            return MarkResult.MARKED

        exists = self.db.query(Appointment.id).filter(Appointment.id == appointment_id).first()
        if exists is None:
            logger.warning(f"[Marker] Appointment {appointment_id} not found while marking {window.value}")
            return MarkResult.FAILED
        return MarkResult.ALREADY_FIRED

    def release(self, appointment_id: str, window: ReminderWindow) -> bool:
        """
        Clear a bit this run set when none of its messages were delivered,
        so the next scheduled scan retries. Returns True if a bit was cleared.
        """
        bit = window.bit
        try:
            updated = (
                self.db.query(Appointment)
                .filter(
                    Appointment.id == appointment_id,
                    Appointment.reminders_sent.op("&")(bit) == bit,
                )
                .update(
                    {Appointment.reminders_sent: Appointment.reminders_sent.op("&")(~bit)},
                    synchronize_session=False,
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[Marker] Failed to release {window.value} for appointment {appointment_id}: {e}")
            return False
        return updated == 1
