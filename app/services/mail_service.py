# app/services/mail_service.py
"""
SMTP transport for e-mail and SMS-via-carrier-gateway messages.
SMS is just a short plain-text e-mail to <phone>@<carrier gateway>.
"""

import smtplib
from email.mime.text import MIMEText
from typing import Optional

from app.config import settings
from app.exceptions import DeliveryError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class MailSender:
    """Sends plain-text mail. One SMTP session per message."""

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 username: Optional[str] = None, password: Optional[str] = None):
        self.smtp_server = host or settings.SMTP_HOST
        self.smtp_port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.from_email = self.username or "noreply@localhost"
        self.from_name = settings.SMTP_FROM_NAME

    def send(self, to_address: str, subject: str, text: str) -> None:
        """Raises DeliveryError on any SMTP / socket failure."""
        msg = MIMEText(text, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_address

        try:
            with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=settings.SMTP_TIMEOUT_SECONDS) as server:
                if settings.SMTP_USE_TLS:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(to_address, cause=e) from e

        logger.debug(f"Mail sent to {to_address}")
