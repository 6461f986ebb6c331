"""OTP manager — issues, verifies and expires one-time codes per email."""

from __future__ import annotations

import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import Enum

from thlight_panel.mail.base import Mailer
from thlight_panel.otp.messages import Purpose, render_otp_email

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# OTP validity period
OTP_TTL = timedelta(minutes=5)
MAX_ATTEMPTS = 3


def generate_code() -> str:
    """Return a uniformly random 6-digit code in 100000–999999."""
    return str(100000 + secrets.randbelow(900000))


@dataclass
class OTPRecord:
    """Pending code for one address."""

    address: str
    code: str
    expires_at: datetime
    attempts: int = 0


class VerifyStatus(str, Enum):
    VERIFIED = "verified"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    LOCKED_OUT = "locked_out"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class VerifyResult:
    status: VerifyStatus
    message: str
    remaining_attempts: int | None = None

    @property
    def success(self) -> bool:
        return self.status is VerifyStatus.VERIFIED


@dataclass(frozen=True)
class IssueResult:
    success: bool
    message: str
    email_id: str | None = None
    delivered: bool = False


class OTPManager:
    """In-memory OTP store with expiry and bounded retries.

    Each address has at most one pending :class:`OTPRecord`.  Issuing
    again replaces it outright.  Expired records are removed lazily when
    a verification observes them; :meth:`purge_expired` is available for
    an optional periodic sweep.
    """

    def __init__(
        self,
        mailer: Mailer,
        ttl: timedelta = OTP_TTL,
        max_attempts: int = MAX_ATTEMPTS,
        clock: Clock | None = None,
        app_name: str = "THLIGHT Panel",
    ) -> None:
        self._mailer = mailer
        self._ttl = ttl
        self._max_attempts = max_attempts
        self._clock = clock or (lambda: datetime.now(UTC))
        self._app_name = app_name
        self._records: dict[str, OTPRecord] = {}
        self._lock = threading.Lock()

    async def issue(self, address: str, purpose: Purpose | str | None = None) -> IssueResult:
        """Generate a code for *address*, store it, and mail it out.

        A failed delivery is logged but does not invalidate the code.
        """
        if not address or not isinstance(address, str):
            return IssueResult(success=False, message="Email is required")

        if not isinstance(purpose, Purpose):
            purpose = Purpose.parse(purpose)

        code = generate_code()
        with self._lock:
            self._records[address] = OTPRecord(
                address=address,
                code=code,
                expires_at=self._clock() + self._ttl,
            )
        logger.info("OTP issued for %s (purpose=%s)", address, purpose.value)

        subject, body = render_otp_email(
            purpose, code, int(self._ttl.total_seconds() // 60), self._app_name
        )
        try:
            email_id = await self._mailer.send(address, subject, body, code)
        except Exception:
            logger.warning(
                "⚠️ Email delivery to %s failed, but OTP is still valid",
                address,
                exc_info=True,
            )
            return IssueResult(success=True, message=f"OTP has been issued for {address}")

        return IssueResult(
            success=True,
            message=f"OTP has been sent to {address}",
            email_id=email_id,
            delivered=True,
        )

    def verify(self, address: str, candidate: str) -> VerifyResult:
        """Check *candidate* against the pending code for *address*."""
        if not address or not candidate:
            return VerifyResult(VerifyStatus.INVALID_INPUT, "Email and OTP are required")

        with self._lock:
            record = self._records.get(address)
            if record is None:
                result = VerifyResult(
                    VerifyStatus.NOT_FOUND,
                    "No OTP found for this email. Please request a new one.",
                )
            elif self._clock() > record.expires_at:
                del self._records[address]
                result = VerifyResult(
                    VerifyStatus.EXPIRED, "OTP has expired. Please request a new one."
                )
            elif record.attempts >= self._max_attempts:
                del self._records[address]
                result = VerifyResult(
                    VerifyStatus.LOCKED_OUT,
                    "Too many incorrect attempts. Please request a new OTP.",
                )
            elif candidate != record.code:
                record.attempts += 1
                remaining = self._max_attempts - record.attempts
                result = VerifyResult(
                    VerifyStatus.INCORRECT,
                    f"Incorrect OTP. {remaining} attempts remaining.",
                    remaining_attempts=remaining,
                )
            else:
                del self._records[address]
                result = VerifyResult(VerifyStatus.VERIFIED, "OTP verified successfully")

        logger.info("OTP verification for %s: %s", address, result.status.value)
        return result

    def status(self, address: str) -> OTPRecord | None:
        """Return a copy of the pending record for *address*, if any."""
        with self._lock:
            record = self._records.get(address)
            return replace(record) if record else None

    def is_expired(self, record: OTPRecord) -> bool:
        return self._clock() > record.expires_at

    def purge_expired(self) -> int:
        """Drop every record past its expiry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [a for a, r in self._records.items() if now > r.expires_at]
            for address in expired:
                del self._records[address]
        if expired:
            logger.info("Purged %d expired OTP(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)
