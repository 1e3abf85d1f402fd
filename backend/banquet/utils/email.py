import asyncio
import logging
from email.message import EmailMessage

import aiosmtplib

from ..core.config import Settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


class Mailer:
    """SMTP delivery configured from settings."""

    def __init__(self, settings: Settings) -> None:
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.SMTP_FROM

    @property
    def configured(self) -> bool:
        return bool(self.host and self.sender)

    async def _send_async(self, msg: EmailMessage) -> None:
        await aiosmtplib.send(
            msg,
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=bool(self.username),
        )

    def send(self, recipient: str, subject: str, body: str) -> None:
        """Send an email; raise EmailDeliveryError when it cannot be delivered."""
        if not self.configured:
            raise EmailDeliveryError("Email service not configured")
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)
        try:
            asyncio.run(self._send_async(msg))
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", recipient, exc)
            raise EmailDeliveryError(str(exc)) from exc
        logger.info("Sent email to %s", recipient)
