"""
Contact preference resolution and recipient routing.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, PreferenceResolutionError
from app.models.profile import Profile, PetOwnerProfile, UserRole, ContactMethod
from app.services import templates
from app.services.notification_gateway import (
    Channel,
    NotificationGateway,
    NotificationIntent,
    RenderedMessage,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTACT_METHOD = ContactMethod.SMS

# Stored values accepted for each method; "phone" predates the sms/email/both naming
_METHOD_ALIASES = {
    "sms": ContactMethod.SMS,
    "phone": ContactMethod.SMS,
    "email": ContactMethod.EMAIL,
    "both": ContactMethod.BOTH,
}


@dataclass(frozen=True)
class ChannelSelection:
    sms: bool
    email: bool

    @classmethod
    def for_method(cls, method: ContactMethod) -> "ChannelSelection":
        return cls(
            sms=method in (ContactMethod.SMS, ContactMethod.BOTH),
            email=method in (ContactMethod.EMAIL, ContactMethod.BOTH),
        )

    @property
    def channels(self) -> List[Channel]:
        selected = []
        if self.sms:
            selected.append(Channel.SMS)
        if self.email:
            selected.append(Channel.EMAIL)
        return selected


@dataclass
class DiagnosticResult:
    sms_sent: bool
    email_sent: bool
    method: ContactMethod

    @property
    def message(self) -> str:
        if self.sms_sent and self.email_sent:
            return "Test SMS and email sent successfully!"
        if self.sms_sent:
            return "Test SMS sent successfully!"
        if self.email_sent:
            return "Test email sent successfully!"
        return "No notifications sent. Please check your contact information."


def parse_contact_method(value: Optional[str]) -> ContactMethod:
    """Map a stored value to a ContactMethod; raises on anything unrecognised."""
    if value is None or not value.strip():
        raise PreferenceResolutionError("No preferred contact method stored")
    method = _METHOD_ALIASES.get(value.strip().lower())
    if method is None:
        raise PreferenceResolutionError(f"Unrecognised contact method '{value}'")
    return method


def owner_intents(owner: Profile, selection: ChannelSelection, message: RenderedMessage) -> List[NotificationIntent]:
    """One intent per selected channel, even when the destination is missing."""
    intents = []
    for channel in selection.channels:
        destination = owner.phone if channel == Channel.SMS else owner.email
        intents.append(NotificationIntent(
            recipient_id=owner.id,
            recipient_role=UserRole.PET_OWNER.value,
            channel=channel,
            destination=destination,
            message=message,
        ))
    return intents


def vet_intents(vet: Profile, message: RenderedMessage) -> List[NotificationIntent]:
    """Vets are reached on every channel their profile has populated."""
    intents = []
    if vet.phone:
        intents.append(NotificationIntent(vet.id, UserRole.VET.value, Channel.SMS, vet.phone, message))
    if vet.email:
        intents.append(NotificationIntent(vet.id, UserRole.VET.value, Channel.EMAIL, vet.email, message))
    return intents


class ContactPreferenceResolver:
    def __init__(self, db: Session):
        self.db = db

    def stored_method(self, owner_id: str) -> ContactMethod:
        """Effective method for an owner, falling back to SMS."""
        owner_profile = self.db.get(PetOwnerProfile, owner_id)
        try:
            if owner_profile is None:
                raise PreferenceResolutionError(f"No owner profile for {owner_id}")
            return parse_contact_method(owner_profile.preferred_contact_method)
        except PreferenceResolutionError as e:
            logger.info(f"[Preferences] {e}; defaulting owner {owner_id} to {DEFAULT_CONTACT_METHOD.value}")
            return DEFAULT_CONTACT_METHOD

    def resolve(self, owner_id: str) -> ChannelSelection:
        return ChannelSelection.for_method(self.stored_method(owner_id))

    def get_owner(self, owner_id: str) -> Profile:
        owner = self.db.get(Profile, owner_id)
        if owner is None or owner.role != UserRole.PET_OWNER:
            raise NotFound("Pet owner", owner_id)
        return owner

    def set_preference(self, owner_id: str, method: ContactMethod) -> PetOwnerProfile:
        self.get_owner(owner_id)
        owner_profile = self.db.get(PetOwnerProfile, owner_id)
        if owner_profile is None:
            owner_profile = PetOwnerProfile(id=owner_id)
            self.db.add(owner_profile)
        owner_profile.preferred_contact_method = method.value
        self.db.commit()
        logger.info(f"[Preferences] Owner {owner_id} now prefers {method.value}")
        return owner_profile

    def send_test_notification(self, owner_id: str, gateway: NotificationGateway) -> DiagnosticResult:
        """Diagnostic send through the same resolver and gateway as real reminders."""
        owner = self.get_owner(owner_id)
        method = self.stored_method(owner_id)
        message = templates.diagnostic_notification(owner, method)
        report = gateway.dispatch(owner_intents(owner, ChannelSelection.for_method(method), message))

        delivered = {o.intent.channel for o in report.outcomes if o.delivered}
        result = DiagnosticResult(
            sms_sent=Channel.SMS in delivered,
            email_sent=Channel.EMAIL in delivered,
            method=method,
        )
        logger.info(f"[Preferences] Test notification for {owner_id}: sms={result.sms_sent}, email={result.email_sent}")
        return result
