"""In-memory email preview store — stands in for a real inbox.

Every simulated outbound email is kept in a bounded, most-recent-first log
so the dashboard's "check your email" widget can recover an OTP without
access to a real mailbox.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_CAPACITY = 10
DEFAULT_LIST_LIMIT = 5
# Must match the OTP manager's expiry window
DEFAULT_FRESHNESS = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(UTC)


def time_ago(then: datetime, now: datetime) -> str:
    """Render the age of *then* as ``"N minutes ago"`` / ``"N seconds ago"``."""
    elapsed = max(int((now - then).total_seconds()), 0)
    minutes = elapsed // 60
    if minutes > 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    return f"{elapsed} second{'s' if elapsed > 1 else ''} ago"


@dataclass(frozen=True)
class EmailPreview:
    """A simulated email exactly as it was "sent"."""

    id: str
    recipient: str
    subject: str
    body: str
    created_at: datetime
    code: str | None = None

    @property
    def timestamp_ms(self) -> int:
        return int(self.created_at.timestamp() * 1000)


@dataclass(frozen=True)
class PreviewEntry:
    """An :class:`EmailPreview` annotated with its age at read time."""

    preview: EmailPreview
    time_ago: str


@dataclass(frozen=True)
class LatestOtp:
    """Outcome of :meth:`EmailPreviewStore.latest_otp_for`."""

    code: str | None
    expired: bool = False
    time_ago: str | None = None
    message: str | None = None


def _require_recipient(recipient: object) -> str:
    if not recipient or not isinstance(recipient, str):
        raise ValueError("Email parameter is required")
    return recipient


class EmailPreviewStore:
    """Bounded ring of simulated emails, newest first.

    Eviction is global: once more than ``capacity`` emails have been
    recorded the oldest one is dropped, whoever it was addressed to.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        list_limit: int = DEFAULT_LIST_LIMIT,
        freshness: timedelta = DEFAULT_FRESHNESS,
        clock: Clock = utc_now,
    ) -> None:
        self._capacity = capacity
        self._list_limit = list_limit
        self._freshness = freshness
        self._clock = clock
        self._previews: list[EmailPreview] = []
        self._last_id = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._previews)

    def record(
        self, recipient: str, subject: str, body: str, code: str | None = None
    ) -> str:
        """Store a simulated email and return its id."""
        with self._lock:
            created_at = self._clock()
            # Millisecond timestamps, bumped so ids stay unique and increasing
            self._last_id = max(int(created_at.timestamp() * 1000), self._last_id + 1)
            preview = EmailPreview(
                id=str(self._last_id),
                recipient=recipient,
                subject=subject,
                body=body,
                created_at=created_at,
                code=code,
            )
            self._previews.insert(0, preview)
            evicted = self._previews[self._capacity :]
            del self._previews[self._capacity :]

        for old in evicted:
            logger.debug("Evicted email preview %s for %s", old.id, old.recipient)
        logger.info("Email preview %s recorded for %s", preview.id, recipient)
        return preview.id

    def list_for(self, recipient: str) -> list[PreviewEntry]:
        """Return the newest previews addressed to *recipient* (case-insensitive)."""
        wanted = _require_recipient(recipient).lower()
        now = self._clock()
        with self._lock:
            matches = [p for p in self._previews if p.recipient.lower() == wanted]
        return [
            PreviewEntry(preview=p, time_ago=time_ago(p.created_at, now))
            for p in matches[: self._list_limit]
        ]

    def latest_otp_for(self, recipient: str) -> LatestOtp:
        """Return the newest OTP sent to *recipient*, withheld once stale.

        Freshness is judged from the preview's own timestamp; the OTP
        manager is not consulted, so a code that was already redeemed is
        still reported until the window closes.
        """
        wanted = _require_recipient(recipient).lower()
        now = self._clock()
        with self._lock:
            candidates = [
                p
                for p in self._previews
                if p.recipient.lower() == wanted and p.code
            ]

        if not candidates:
            return LatestOtp(code=None, message="No OTP found")

        latest = sorted(candidates, key=lambda p: p.created_at, reverse=True)[0]
        age = time_ago(latest.created_at, now)
        if now - latest.created_at >= self._freshness:
            return LatestOtp(code=None, expired=True, time_ago=age)
        return LatestOtp(code=latest.code, time_ago=age)
