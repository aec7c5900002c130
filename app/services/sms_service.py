"""
SMS Service for sending notifications via Twilio.
"""
import logging
from twilio.rest import Client
from twilio.base.exceptions import TwilioException

from app.core.config import Settings
from app.core.exceptions import GatewayError

logger = logging.getLogger(__name__)


class SMSService:
    """
    Sends single SMS messages via Twilio.
    Every failure is raised as GatewayError; nothing is retried here.
    """

    def __init__(self, settings: Settings, client: Client = None):
        """Initialize Twilio client with credentials from settings."""
        self.settings = settings
        self.enabled = settings.twilio_enabled and settings.twilio_sms_enabled
        self.client = client

        if client is not None:
            return

        if self.enabled and settings.twilio_account_sid and settings.twilio_auth_token:
            try:
                self.client = Client(
                    settings.twilio_account_sid,
                    settings.twilio_auth_token,
                    timeout=10  # 10 second timeout for Twilio API calls
                )
                logger.info("Twilio SMS client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize Twilio client: {e}")
                self.enabled = False
        else:
            logger.warning("Twilio SMS is disabled or credentials are missing")
            self.enabled = False

    def format_phone_number(self, phone_number: str) -> str:
        """
        Format phone number to E.164 format for Twilio.

        Args:
            phone_number: Phone number in any format

        Returns:
            Formatted phone number in E.164 format (e.g., +15551234567)
        """
        if not phone_number:
            return ""

        digits = ''.join(filter(str.isdigit, phone_number))
        if phone_number.strip().startswith('+'):
            return f"+{digits}"

        # National numbers: drop a trunk prefix and add the default country code
        if digits.startswith('0'):
            digits = digits.lstrip('0')
        country_code = self.settings.sms_default_country_code
        if len(digits) == 10:
            return f"+{country_code}{digits}"
        return f"+{digits}"

    def _sender(self) -> dict:
        # Priority: messaging service > custom sender ID > custom phone > Twilio number
        if self.settings.twilio_messaging_service_sid:
            return {"messaging_service_sid": self.settings.twilio_messaging_service_sid}
        if self.settings.twilio_custom_sender_id:
            return {"from_": self.settings.twilio_custom_sender_id}
        if self.settings.twilio_custom_phone_number:
            return {"from_": self.format_phone_number(self.settings.twilio_custom_phone_number)}
        if self.settings.twilio_phone_number:
            return {"from_": self.settings.twilio_phone_number}
        raise GatewayError(
            "No sender configured. Set TWILIO_MESSAGING_SERVICE_SID, TWILIO_CUSTOM_SENDER_ID, "
            "TWILIO_CUSTOM_PHONE_NUMBER or TWILIO_PHONE_NUMBER",
            channel="sms",
        )

    def send_sms(self, to: str, body: str) -> str:
        """
        Send one SMS.

        Args:
            to: Destination phone number (any format, normalised to E.164)
            body: Message text

        Returns:
            Twilio message SID

        Raises:
            GatewayError: if the service is disabled, the destination is missing,
                or Twilio rejects the message
        """
        if not self.enabled or self.client is None:
            raise GatewayError("SMS service is disabled or Twilio client not initialized", channel="sms")

        if not to:
            raise GatewayError("No phone number provided", channel="sms")

        formatted_to = self.format_phone_number(to)
        sender = self._sender()

        try:
            message = self.client.messages.create(body=body, to=formatted_to, **sender)
        except TwilioException as e:
            logger.error(f"[SMS] Twilio error sending to {formatted_to}: {e}")
            raise GatewayError(f"Twilio error: {e}", channel="sms") from e
        except Exception as e:
            # Transport errors from the Twilio HTTP client (connection reset, timeout)
            logger.error(f"[SMS] Unexpected error sending to {formatted_to}: {e}")
            raise GatewayError(f"SMS error: {e}", channel="sms") from e

        if message.status == 'failed' or message.error_code:
            logger.error(
                f"[SMS] Delivery failed to {formatted_to}. Status: {message.status}, "
                f"Error Code: {message.error_code}, Error Message: {message.error_message}"
            )
            raise GatewayError(
                f"Twilio delivery failed ({message.error_code}): {message.error_message or message.status}",
                channel="sms",
            )

        logger.info(f"[SMS] Sent to {formatted_to}. SID: {message.sid}, Status: {message.status}")
        return message.sid
