"""
Appointment lifecycle: creation and the status state machine.

    pending   -> confirmed | cancelled
    confirmed -> completed | cancelled
    completed, cancelled: terminal

A successful transition is persisted first; the resulting notifications
are best effort and never roll the status back.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from app.core.clock import local_to_utc
from app.core.config import settings
from app.core.exceptions import InvalidTransition, NotFound
from app.models.appointment import Appointment, AppointmentStatus
from app.models.profile import Profile, UserRole
from app.services import templates
from app.services.contact_preferences import ContactPreferenceResolver, owner_intents, vet_intents
from app.services.notification_gateway import (
    DeliveryOutcome,
    NotificationGateway,
    NotificationIntent,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


def can_transition(current: AppointmentStatus, requested: AppointmentStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


def is_terminal(status: AppointmentStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


@dataclass
class TransitionResult:
    appointment: Appointment
    previous_status: AppointmentStatus
    intents: List[NotificationIntent] = field(default_factory=list)
    outcomes: List[DeliveryOutcome] = field(default_factory=list)


class AppointmentService:
    def __init__(self, db: Session, gateway: NotificationGateway,
                 resolver: Optional[ContactPreferenceResolver] = None):
        self.db = db
        self.gateway = gateway
        self.resolver = resolver or ContactPreferenceResolver(db)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, appointment_id: str) -> Appointment:
        appointment = self.db.get(Appointment, appointment_id)
        if appointment is None:
            raise NotFound("Appointment", appointment_id)
        return appointment

    def list_appointments(self, owner_id: Optional[str] = None, vet_id: Optional[str] = None,
                          status: Optional[AppointmentStatus] = None) -> List[Appointment]:
        query = self.db.query(Appointment)
        if owner_id:
            query = query.filter(Appointment.pet_owner_id == owner_id)
        if vet_id:
            query = query.filter(Appointment.vet_id == vet_id)
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.starts_at.asc()).all()

    def _get_party(self, party_id: str, role: UserRole) -> Profile:
        party = self.db.get(Profile, party_id)
        if party is None or party.role != role:
            label = "Veterinarian" if role == UserRole.VET else "Pet owner"
            raise NotFound(label, party_id)
        return party

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, owner_id: str, vet_id: str, pet_name: str, pet_type: str,
               appointment_date, appointment_time, reason: str,
               consultation_type: Optional[str] = None,
               duration_minutes: Optional[int] = None,
               timezone: Optional[str] = None,
               notes: Optional[str] = None) -> Appointment:
        self._get_party(owner_id, UserRole.PET_OWNER)
        self._get_party(vet_id, UserRole.VET)

        tz_name = timezone or settings.clinic_timezone
        appointment = Appointment(
            pet_owner_id=owner_id,
            vet_id=vet_id,
            pet_name=pet_name,
            pet_type=pet_type,
            reason=reason,
            consultation_type=consultation_type,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            timezone=tz_name,
            starts_at=local_to_utc(appointment_date, appointment_time, tz_name),
            duration_minutes=duration_minutes or settings.default_appointment_duration_minutes,
            status=AppointmentStatus.PENDING,
            reminders_sent=0,
            notes=notes,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"[Appointment] Created {appointment.id} for {pet_name} on {appointment.starts_at.isoformat()}")
        return appointment

    def transition(self, appointment_id: str, requested: AppointmentStatus, actor_role: UserRole) -> TransitionResult:
        """
        Apply a status change requested by a vet or owner.

        Raises:
            NotFound: appointment does not exist
            InvalidTransition: requested is not a direct successor of the
                current status (including when a concurrent change won)
        """
        appointment = self.get(appointment_id)
        current = AppointmentStatus(appointment.status)

        if not can_transition(current, requested):
            logger.info(f"[Appointment] Rejected {current.value} -> {requested.value} for {appointment_id}")
            raise InvalidTransition(current.value, requested.value, appointment_id)

        updated = (
            self.db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.status == current)
            .update({Appointment.status: requested}, synchronize_session=False)
        )
        self.db.commit()

        if updated != 1:
            self.db.refresh(appointment)
            logger.warning(f"[Appointment] Concurrent status change on {appointment_id}; now {appointment.status}")
            raise InvalidTransition(AppointmentStatus(appointment.status).value, requested.value, appointment_id)

        self.db.refresh(appointment)
        logger.info(f"[Appointment] {appointment_id}: {current.value} -> {requested.value} by {actor_role.value}")

        result = TransitionResult(appointment=appointment, previous_status=current)
        result.intents = self.build_status_intents(appointment, requested, actor_role)
        report = self.gateway.dispatch(result.intents)
        result.outcomes = report.outcomes
        if report.failed:
            logger.warning(
                f"[Appointment] {report.failed} of {len(result.intents)} status notifications failed for {appointment_id}"
            )
        return result

    def build_status_intents(self, appointment: Appointment, status: AppointmentStatus,
                             actor_role: UserRole) -> List[NotificationIntent]:
        owner = appointment.pet_owner
        vet = appointment.vet
        owner_message = templates.owner_status_change(appointment, owner, vet, status)
        vet_message = templates.vet_status_change(appointment, owner, vet, status, actor_role.value)
        return (
            owner_intents(owner, self.resolver.resolve(owner.id), owner_message)
            + vet_intents(vet, vet_message)
        )
