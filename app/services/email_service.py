"""
Email Service
Sends HTML notification emails over SMTP
"""
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import make_msgid, formataddr

from app.core.config import Settings
from app.core.exceptions import GatewayError

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self, settings: Settings):
        self.enabled = settings.email_enabled
        self.smtp_host = settings.smtp_server
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_username
        self.smtp_password = settings.smtp_password
        self.smtp_timeout = settings.smtp_timeout
        self.from_email = settings.email_from
        self.display_name = settings.clinic_name

    def _build_message(self, to_email: str, subject: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart('alternative')
        # From address must match the SMTP username for most providers
        from_address = self.smtp_user if self.smtp_user else self.from_email
        msg['From'] = formataddr((self.display_name, from_address))
        msg['To'] = to_email
        msg['Subject'] = subject
        msg['Message-ID'] = make_msgid(domain=from_address.split('@')[-1] if '@' in from_address else None)
        msg.attach(MIMEText(html_body, 'html'))
        return msg

    def send_email(self, to: str, subject: str, html: str) -> str:
        """
        Send one HTML email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            The Message-ID header of the sent message

        Raises:
            GatewayError: if email is disabled, unconfigured, or the SMTP
                conversation fails
        """
        if not self.enabled:
            raise GatewayError("Email service is disabled. Set EMAIL_ENABLED=true to enable.", channel="email")

        if not self.smtp_user or not self.smtp_password:
            raise GatewayError("SMTP credentials not configured", channel="email")

        if not to:
            raise GatewayError("No email address provided", channel="email")

        msg = self._build_message(to, subject, html)

        try:
            logger.info(f"[Email] Connecting to SMTP server: {self.smtp_host}:{self.smtp_port}")
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.smtp_timeout) as server:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"[Email] SMTP authentication failed for user {self.smtp_user}: {e}")
            raise GatewayError(f"SMTP authentication failed: {e}", channel="email") from e
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"[Email] Recipient refused: {to}")
            raise GatewayError(f"Recipient refused: {to}", channel="email") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[Email] Failed to send email to {to}: {e}", exc_info=True)
            raise GatewayError(f"SMTP error: {e}", channel="email") from e

        logger.info(f"[Email] ✓ Email sent successfully to {to}")
        return msg['Message-ID']
