"""Email sending over SMTP (aiosmtplib).

Sends are skipped when SMTP_HOST is not configured; the rest of the
application works without email. Services never talk to SMTP directly: they
get a mailer with a ``send(to_email, subject, body)`` method, which the HTTP
layer binds to FastAPI background tasks so delivery happens after the
response is written.
"""

import logging
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from fastapi import BackgroundTasks

from mealplannr.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Thin wrapper around aiosmtplib for plain-text notification emails."""

    def __init__(self, smtp_host: Optional[str], smtp_port: int, smtp_username: Optional[str],
                 smtp_password: Optional[str], from_email: str, from_name: str,
                 use_tls: bool):
        self._host = smtp_host
        self._port = smtp_port
        self._username = smtp_username or None
        self._password = smtp_password or None
        self._from_email = from_email
        self._from_name = from_name
        self._use_tls = use_tls

    @property
    def is_configured(self) -> bool:
        return bool(self._host)

    async def send_email(self, to_email: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email. Returns True on success, False otherwise (never raises).
        When SMTP is not configured the call is a no-op that returns False.
        """
        if not self.is_configured:
            logger.info("Email not configured, skipping send to %s: %s", to_email, subject)
            return False

        msg = MIMEText(body, "plain")
        msg["Subject"] = subject
        msg["From"] = f"{self._from_name} <{self._from_email}>"
        msg["To"] = to_email

        try:
            await aiosmtplib.send(
                msg,
                hostname=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                start_tls=self._use_tls,
            )
            logger.info("Email sent to %s: %s", to_email, subject)
            return True
        except Exception as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            return False


class BackgroundMailer:
    """Queues emails on a request's background tasks."""

    def __init__(self, background_tasks: BackgroundTasks, service: Optional[EmailService] = None):
        self._background_tasks = background_tasks
        self._service = service or email_service

    def send(self, to_email: str, subject: str, body: str) -> None:
        self._background_tasks.add_task(self._service.send_email, to_email, subject, body)


email_service = EmailService(
    smtp_host=settings.SMTP_HOST,
    smtp_port=settings.SMTP_PORT,
    smtp_username=settings.SMTP_USERNAME,
    smtp_password=settings.SMTP_PASSWORD,
    from_email=settings.EMAILS_FROM_EMAIL,
    from_name=settings.EMAILS_FROM_NAME,
    use_tls=settings.SMTP_USE_TLS,
)
