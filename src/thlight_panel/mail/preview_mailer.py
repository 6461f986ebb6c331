"""Preview mailer — "delivers" emails into the in-memory preview store."""

from __future__ import annotations

import asyncio
import logging

from thlight_panel.mail.base import Mailer
from thlight_panel.mail.preview_store import EmailPreviewStore

logger = logging.getLogger(__name__)


class PreviewMailer(Mailer):
    """Mailer that never leaves the process.

    An optional ``delay_seconds`` reproduces the latency of a real send
    for demos.
    """

    def __init__(self, store: EmailPreviewStore, delay_seconds: float = 0) -> None:
        self._store = store
        self._delay = delay_seconds

    async def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        code: str | None = None,
    ) -> str:
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        email_id = self._store.record(recipient, subject, body, code)
        logger.info("📧 Preview email %s delivered to %s: %s", email_id, recipient, subject)
        return email_id
