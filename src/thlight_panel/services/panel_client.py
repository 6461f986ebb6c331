"""Panel API client — async HTTP client for the THLIGHT Panel API.

Wraps the calls the dashboard makes during registration and password
reset: validate the address, request an OTP, poll the email preview
store for it, and redeem it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from thlight_panel.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ApiResult:
    """Lightweight value object for ``{success|isValid, message}`` replies."""

    ok: bool
    message: str


@dataclass
class InboxEmail:
    id: str
    subject: str
    content: str
    time_ago: str
    otp: str | None = None


@dataclass
class LatestOtpReply:
    otp: str | None
    expired: bool = False
    time_ago: str | None = None
    extra: dict = field(default_factory=dict)


class PanelClient:
    """Async HTTP wrapper around the panel's OTP and email preview API."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport)

    # ── Email validation ─────────────────────────────────

    async def validate_email(self, email: str) -> ApiResult:
        """Ask the API whether *email* is acceptable."""
        url = f"{self._base_url}/validate-email"
        try:
            async with self._client() as client:
                resp = await client.post(url, json={"email": email})
            data = resp.json()
            return ApiResult(ok=data.get("isValid", False), message=data.get("message", ""))
        except httpx.HTTPError as exc:
            logger.exception("Email validation request error: %s", exc)
            return ApiResult(ok=False, message="Error validating email")

    # ── OTP ──────────────────────────────────────────────

    async def send_otp(self, email: str, purpose: str = "verification") -> ApiResult:
        """Request an OTP for *email*."""
        url = f"{self._base_url}/send-otp"
        try:
            async with self._client() as client:
                resp = await client.post(url, json={"email": email, "purpose": purpose})
            data = resp.json()
            logger.info("OTP send result for %s: %s", email, data.get("message"))
            return ApiResult(ok=data.get("success", False), message=data.get("message", ""))
        except httpx.HTTPError as exc:
            logger.exception("OTP send request error: %s", exc)
            return ApiResult(ok=False, message="Error sending OTP")

    async def verify_otp(self, email: str, otp: str) -> ApiResult:
        """Redeem *otp* for *email*."""
        url = f"{self._base_url}/verify-otp"
        try:
            async with self._client() as client:
                resp = await client.post(url, json={"email": email, "otp": otp})
            data = resp.json()
            return ApiResult(ok=data.get("success", False), message=data.get("message", ""))
        except httpx.HTTPError as exc:
            logger.exception("OTP verify request error: %s", exc)
            return ApiResult(ok=False, message="Error verifying OTP")

    # ── Email previews ───────────────────────────────────

    async def check_inbox(self, email: str) -> list[InboxEmail]:
        """Return the simulated emails recently sent to *email*."""
        url = f"{self._base_url}/email-previews"
        try:
            async with self._client() as client:
                resp = await client.get(url, params={"email": email})
            if resp.status_code != 200:
                logger.error("Inbox check failed: %s %s", resp.status_code, resp.text)
                return []
            return [
                InboxEmail(
                    id=item["id"],
                    subject=item["subject"],
                    content=item["content"],
                    time_ago=item["timeAgo"],
                    otp=item.get("otp"),
                )
                for item in resp.json()["emails"]
            ]
        except httpx.HTTPError as exc:
            logger.exception("Inbox check request error: %s", exc)
            return []

    async def latest_otp(self, email: str) -> LatestOtpReply | None:
        """Fetch the newest fresh OTP emailed to *email*.

        Returns ``None`` when the request itself failed.
        """
        url = f"{self._base_url}/latest-otp"
        try:
            async with self._client() as client:
                resp = await client.get(url, params={"email": email})
            if resp.status_code != 200:
                logger.error("Latest OTP lookup failed: %s %s", resp.status_code, resp.text)
                return None
            data = resp.json()
            return LatestOtpReply(
                otp=data.get("otp"),
                expired=data.get("expired", False),
                time_ago=data.get("timeAgo"),
                extra={k: v for k, v in data.items() if k not in {"otp", "expired", "timeAgo"}},
            )
        except httpx.HTTPError as exc:
            logger.exception("Latest OTP request error: %s", exc)
            return None
