"""
Notification Service

Sends e-mail notifications for triggered alerts over SMTP.
Delivery is best effort: a failed send is logged and reported as False,
and the alert stays triggered.
"""

import smtplib
from decimal import Decimal
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable, Optional

from cryptoalert.config import Settings
from cryptoalert.models.alert import Alert
from cryptoalert.templates.email_templates import (
    ALERT_HTML_TEMPLATE,
    ALERT_SUBJECT,
    ALERT_TEXT_TEMPLATE,
    CONDITION_EMOJI,
    CONDITION_TEXT,
    TEST_HTML,
    TEST_SUBJECT,
    TEST_TEXT,
)
from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)


class EmailNotConfiguredError(Exception):
    """Raised when an e-mail is requested but SMTP is not configured."""


def format_usd(value: Decimal) -> str:
    """
    Format a USD amount with thousands separators and 2-8 decimals.

    Examples:
        Decimal("50000")        -> "50,000.00"
        Decimal("0.00012345")   -> "0.00012345"
        Decimal("1234.5600")    -> "1,234.56"
    """
    text = f"{Decimal(value):,.8f}"
    whole, fraction = text.split(".")
    fraction = fraction.rstrip("0")
    if len(fraction) < 2:
        fraction = fraction.ljust(2, "0")
    return f"{whole}.{fraction}"


class EmailNotificationService:
    """Service for sending alert notifications via SMTP."""

    def __init__(self, settings: Settings, smtp_factory: Optional[Callable] = None):
        """
        Initialize notification service.

        Args:
            settings: Application settings (SMTP host, credentials, sender name)
            smtp_factory: Callable(host, port, timeout=...) returning an SMTP
                connection; defaults to smtplib.SMTP or smtplib.SMTP_SSL
        """
        self.settings = settings
        self.enabled = settings.email_enabled
        if smtp_factory is None:
            smtp_factory = smtplib.SMTP_SSL if settings.smtp_secure else smtplib.SMTP
        self.smtp_factory = smtp_factory

        if not self.enabled:
            logger.warning("SMTP not configured. Email notifications disabled.")

    def notify(self, alert: Alert, current_price: Decimal) -> bool:
        """
        Send the alert e-mail for a triggered alert.

        Args:
            alert: Triggered alert
            current_price: Price that fired the alert

        Returns:
            bool: True if the message was handed to the SMTP server
        """
        if not self.enabled:
            logger.warning(
                f"Email service not configured, skipping notification for alert {alert.id}"
            )
            return False

        try:
            message = self._build_alert_message(alert, current_price)
            self._send(message)

            logger.info(
                f"Alert notification sent: alert_id={alert.id}, "
                f"coin={alert.coin_id}, price=${current_price}, to={alert.email}"
            )
            return True

        except Exception as e:
            logger.error(f"Failed to send alert notification for alert {alert.id}: {e}")
            return False

    def send_test_email(self, to_email: str) -> bool:
        """
        Send a fixed test message.

        Raises:
            EmailNotConfiguredError: If SMTP is not configured
            smtplib.SMTPException, OSError: If delivery fails
        """
        if not self.enabled:
            raise EmailNotConfiguredError("Email service not configured")

        message = self._new_message(to_email, TEST_SUBJECT)
        message.set_content(TEST_TEXT)
        message.add_alternative(TEST_HTML, subtype="html")

        try:
            self._send(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send test email to {to_email}: {e}")
            raise

        logger.info(f"Test email sent to {to_email}")
        return True

    def _build_alert_message(self, alert: Alert, current_price: Decimal) -> EmailMessage:
        """
        Build the multipart alert e-mail.

        Example (text part):
            "CryptoAlert - Price Alert Triggered!

            Bitcoin has exceeded your target price.

            Current Price: $50,000.00
            Target Price: $50,000.00
            ..."
        """
        values = {
            "coin_name": alert.coin_name,
            "current_price": format_usd(current_price),
            "target_price": format_usd(alert.target_price),
            "condition_text": CONDITION_TEXT.get(alert.condition, alert.condition),
            "emoji": CONDITION_EMOJI.get(alert.condition, ""),
            "created_date": alert.created_at.strftime("%Y-%m-%d") if alert.created_at else "unknown",
        }

        message = self._new_message(alert.email, ALERT_SUBJECT.format(**values))
        message.set_content(ALERT_TEXT_TEMPLATE.format(**values))
        message.add_alternative(ALERT_HTML_TEMPLATE.format(**values), subtype="html")
        return message

    def _new_message(self, to_email: str, subject: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.settings.email_from_name, self.settings.smtp_user))
        message["To"] = to_email
        return message

    def _send(self, message: EmailMessage):
        with self.smtp_factory(
            self.settings.smtp_host, self.settings.smtp_port, timeout=self.settings.api_timeout
        ) as smtp:
            if not self.settings.smtp_secure:
                smtp.starttls()
            smtp.login(self.settings.smtp_user, self.settings.smtp_pass)
            smtp.send_message(message)
