"""
Reminder window scans.

Two schedulable jobs share one algorithm: find confirmed appointments whose
start falls inside [now, now + window], claim the window on each one with
the deduplication marker, and notify the owner (per preference) and the vet
(every populated channel). A claim whose messages all failed is released so
the next run retries it.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Callable, List

from sqlalchemy.orm import Session, joinedload

from app.core.clock import ensure_utc
from app.core.config import settings
from app.models.appointment import Appointment, AppointmentStatus, ReminderWindow
from app.services import templates
from app.services.contact_preferences import ContactPreferenceResolver, owner_intents, vet_intents
from app.services.notification_gateway import NotificationGateway, RenderedMessage
from app.services.reminder_marker import MarkResult, ReminderMarker

logger = logging.getLogger(__name__)


@dataclass
class ScanSummary:
    window: str
    candidates_scanned: int = 0
    reminders_sent: int = 0
    messages_sent: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WindowPolicy:
    window: ReminderWindow
    span: timedelta
    owner_message: Callable[..., RenderedMessage]
    vet_message: Callable[..., RenderedMessage]


def window_policy(window: ReminderWindow) -> WindowPolicy:
    if window == ReminderWindow.DAY_AHEAD:
        return WindowPolicy(
            window=window,
            span=timedelta(hours=settings.day_ahead_window_hours),
            owner_message=templates.day_ahead_owner,
            vet_message=templates.day_ahead_vet,
        )
    return WindowPolicy(
        window=window,
        span=timedelta(minutes=settings.hour_ahead_window_minutes),
        owner_message=templates.hour_ahead_owner,
        vet_message=templates.hour_ahead_vet,
    )


class ReminderWindowScanner:
    def __init__(self, db: Session, gateway: NotificationGateway, policy: WindowPolicy,
                 resolver: ContactPreferenceResolver = None, marker: ReminderMarker = None):
        self.db = db
        self.gateway = gateway
        self.policy = policy
        self.resolver = resolver or ContactPreferenceResolver(db)
        self.marker = marker or ReminderMarker(db)

    @classmethod
    def for_window(cls, db: Session, gateway: NotificationGateway, window: ReminderWindow) -> "ReminderWindowScanner":
        return cls(db, gateway, window_policy(window))

    @property
    def window(self) -> ReminderWindow:
        return self.policy.window

    def find_candidates(self, now: datetime) -> List[Appointment]:
        """Confirmed appointments starting within [now, now + span], both ends inclusive."""
        start = ensure_utc(now)
        end = start + self.policy.span
        return (
            self.db.query(Appointment)
            .options(joinedload(Appointment.pet_owner), joinedload(Appointment.vet))
            .filter(
                Appointment.status == AppointmentStatus.CONFIRMED,
                Appointment.starts_at >= start,
                Appointment.starts_at <= end,
            )
            .order_by(Appointment.starts_at.asc())
            .populate_existing()
            .all()
        )

    def scan(self, now: datetime) -> ScanSummary:
        """
        Run one scan. Errors loading the candidate set propagate to the
        caller; everything after that is isolated per appointment.
        """
        summary = ScanSummary(window=self.window.value)
        candidates = self.find_candidates(now)
        summary.candidates_scanned = len(candidates)
        logger.info(f"[Scanner:{self.window.value}] {len(candidates)} candidate(s) at {ensure_utc(now).isoformat()}")

        for appointment in candidates:
            try:
                self._process(appointment, summary)
            except Exception as e:
                self.db.rollback()
                summary.failed += 1
                logger.error(
                    f"[Scanner:{self.window.value}] Unexpected error on appointment {appointment.id}: {e}",
                    exc_info=True,
                )

        logger.info(
            f"[Scanner:{self.window.value}] Done: scanned={summary.candidates_scanned}, "
            f"reminded={summary.reminders_sent}, messages={summary.messages_sent}, "
            f"skipped={summary.skipped}, failed={summary.failed}"
        )
        return summary

    def _process(self, appointment: Appointment, summary: ScanSummary) -> None:
        window = self.window
        if appointment.has_reminder(window):
            summary.skipped += 1
            return

        claim = self.marker.mark_fired(appointment.id, window)
        if claim == MarkResult.ALREADY_FIRED:
            logger.info(f"[Scanner:{window.value}] {appointment.id} already reminded by another run")
            summary.skipped += 1
            return
        if claim == MarkResult.FAILED:
            summary.failed += 1
            return

        try:
            owner, vet = appointment.pet_owner, appointment.vet
            intents = (
                owner_intents(owner, self.resolver.resolve(owner.id), self.policy.owner_message(appointment, owner, vet))
                + vet_intents(vet, self.policy.vet_message(appointment, owner, vet))
            )
            report = self.gateway.dispatch(intents)
        except Exception:
            self.marker.release(appointment.id, window)
            raise
        summary.messages_sent += report.delivered

        if report.any_delivered:
            summary.reminders_sent += 1
            logger.info(f"[Scanner:{window.value}] Reminded {appointment.id} ({report.delivered}/{len(intents)} delivered)")
            return

        self.marker.release(appointment.id, window)
        summary.failed += 1
        logger.warning(f"[Scanner:{window.value}] All {len(intents)} message(s) failed for {appointment.id}; will retry next run")
