"""SMTP mailer — sends emails via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage
from email.utils import make_msgid

import aiosmtplib

from thlight_panel.config import Settings, settings as default_settings
from thlight_panel.mail.base import Mailer

logger = logging.getLogger(__name__)


class SmtpMailer(Mailer):
    """Sends transactional emails using the configured SMTP server."""

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    async def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        code: str | None = None,
    ) -> str:
        """Send a plain-text email and return its ``Message-ID``."""
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.email_from
        msg["To"] = recipient
        msg["Message-ID"] = make_msgid()
        msg.set_content(body)

        logger.info("Sending email to %s via %s", recipient, self._config.smtp_host)

        await aiosmtplib.send(
            msg,
            hostname=self._config.smtp_host,
            port=self._config.smtp_port,
            username=self._config.smtp_username or None,
            password=self._config.smtp_password or None,
            start_tls=True,
        )

        logger.info("Email sent to %s", recipient)
        return msg["Message-ID"]
