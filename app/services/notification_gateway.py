"""
Notification Gateway
Routes rendered notifications to the SMS or email provider and reports a
per-message outcome. Built once per process and injected into the services.
"""
import enum
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from app.core.config import settings
from app.core.exceptions import GatewayError
from app.services.email_service import EmailService
from app.services.sms_service import SMSService

logger = logging.getLogger(__name__)


class Channel(str, enum.Enum):
    SMS = "sms"
    EMAIL = "email"


@dataclass(frozen=True)
class RenderedMessage:
    """Text used for SMS; subject and HTML used for email."""
    text: str
    subject: str = ""
    html: str = ""


@dataclass(frozen=True)
class NotificationIntent:
    recipient_id: str
    recipient_role: str
    channel: Channel
    destination: Optional[str]
    message: RenderedMessage


@dataclass
class DeliveryOutcome:
    intent: NotificationIntent
    delivered: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class DispatchReport:
    outcomes: List[DeliveryOutcome] = field(default_factory=list)

    @property
    def delivered(self) -> int:
        return sum(1 for o in self.outcomes if o.delivered)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.delivered)

    @property
    def any_delivered(self) -> bool:
        return self.delivered > 0


class NotificationGateway:
    def __init__(self, sms_service: SMSService, email_service: EmailService):
        self.sms_service = sms_service
        self.email_service = email_service

    def send_sms(self, to: str, body: str) -> str:
        return self.sms_service.send_sms(to, body)

    def send_email(self, to: str, subject: str, html: str) -> str:
        return self.email_service.send_email(to, subject, html)

    def send(self, intent: NotificationIntent) -> str:
        if intent.channel == Channel.SMS:
            return self.send_sms(intent.destination, intent.message.text)
        return self.send_email(intent.destination, intent.message.subject, intent.message.html)

    def dispatch(self, intents: List[NotificationIntent]) -> DispatchReport:
        """
        Send every intent independently. A GatewayError for one recipient is
        logged and recorded; it never stops the remaining intents.
        """
        report = DispatchReport()
        for intent in intents:
            try:
                message_id = self.send(intent)
            except GatewayError as e:
                logger.warning(
                    f"[Gateway] {intent.channel.value} to {intent.recipient_role} "
                    f"{intent.recipient_id} failed: {e.reason}"
                )
                report.outcomes.append(DeliveryOutcome(intent=intent, delivered=False, error=e.reason))
                continue
            report.outcomes.append(DeliveryOutcome(intent=intent, delivered=True, message_id=message_id))
        return report


@lru_cache()
def get_notification_gateway() -> NotificationGateway:
    """Process-wide gateway; FastAPI dependency and CLI entrypoint."""
    return NotificationGateway(SMSService(settings), EmailService(settings))
