"""Panel API router — email validation, OTP and email preview endpoints.

Endpoints
---------
POST /api/validate-email            → check an address before sending an OTP
POST /api/send-otp                  → issue an OTP and "email" it
POST /api/verify-otp                → redeem an OTP
GET  /api/otp-status?email=...      → debug view of the pending OTP
GET  /api/email-previews?email=...  → simulated inbox for an address
GET  /api/latest-otp?email=...      → newest still-fresh OTP for an address
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from thlight_panel.config import settings
from thlight_panel.mail.base import Mailer
from thlight_panel.mail.preview_mailer import PreviewMailer
from thlight_panel.mail.preview_store import EmailPreviewStore
from thlight_panel.mail.smtp_mailer import SmtpMailer
from thlight_panel.otp.manager import OTPManager
from thlight_panel.validation.email import validate_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["panel"])


# ── Shared instances (in-memory singletons) ──────────────

def _build_mailer(store: EmailPreviewStore) -> Mailer:
    if settings.mail_backend == "smtp":
        return SmtpMailer(settings)
    return PreviewMailer(store, delay_seconds=settings.mail_delay_seconds)


_preview_store = EmailPreviewStore(
    capacity=settings.preview_capacity,
    list_limit=settings.preview_list_limit,
    freshness=timedelta(seconds=settings.otp_ttl_seconds),
)
_otp_manager = OTPManager(
    mailer=_build_mailer(_preview_store),
    ttl=timedelta(seconds=settings.otp_ttl_seconds),
    max_attempts=settings.otp_max_attempts,
    app_name=settings.app_name,
)


def get_preview_store() -> EmailPreviewStore:
    return _preview_store


def get_otp_manager() -> OTPManager:
    return _otp_manager


# ── Response / request models ────────────────────────────

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmailValidationRequest(BaseModel):
    # Any type is accepted; validate_email reports non-strings itself
    email: Any = None


class EmailValidationResponse(CamelModel):
    is_valid: bool
    message: str


class SendOTPRequest(BaseModel):
    email: str | None = None
    # Free-form label, only selects the email wording
    purpose: Any = None


class VerifyOTPRequest(BaseModel):
    email: str | None = None
    otp: str | None = None


class OTPResponse(BaseModel):
    success: bool
    message: str


class OTPStatusResponse(BaseModel):
    exists: bool
    expiry: datetime | None = None
    attempts: int | None = None
    expired: bool | None = None


class EmailPreviewItem(CamelModel):
    id: str
    subject: str
    content: str
    timestamp: int
    time_ago: str
    otp: str | None = None


class EmailPreviewsResponse(BaseModel):
    emails: list[EmailPreviewItem]


def _bad_request(model: BaseModel) -> JSONResponse:
    return JSONResponse(status_code=400, content=model.model_dump(by_alias=True))


def _missing_email(message: str = "Email parameter is required") -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


# ── Endpoints ────────────────────────────────────────────

@router.post("/validate-email", response_model=EmailValidationResponse)
async def validate_email_endpoint(body: EmailValidationRequest | None = None):
    """Check that an address is a plausible account on the allowed domain."""
    email = body.email if body else None
    result = validate_email(email, settings.allowed_email_domain)
    response = EmailValidationResponse(is_valid=result.is_valid, message=result.message)
    if not result.is_valid:
        logger.info("Rejected email %r: %s", email, result.message)
        return _bad_request(response)
    return response


@router.post("/send-otp", response_model=OTPResponse)
async def send_otp(
    body: SendOTPRequest, otp_manager: OTPManager = Depends(get_otp_manager)
):
    """Issue an OTP for the given address.

    With the preview backend nothing leaves the process; the email lands
    in the preview store where ``/api/email-previews`` can read it.
    """
    result = await otp_manager.issue(body.email, body.purpose)
    response = OTPResponse(success=result.success, message=result.message)
    if not result.success:
        return _bad_request(response)
    return response


@router.post("/verify-otp", response_model=OTPResponse)
async def verify_otp(
    body: VerifyOTPRequest, otp_manager: OTPManager = Depends(get_otp_manager)
):
    """Redeem an OTP for the given address."""
    result = otp_manager.verify(body.email, body.otp)
    response = OTPResponse(success=result.success, message=result.message)
    if not result.success:
        return _bad_request(response)
    return response


@router.get("/otp-status", response_model=OTPStatusResponse, response_model_exclude_none=True)
async def otp_status(
    email: str | None = Query(None),
    otp_manager: OTPManager = Depends(get_otp_manager),
):
    """Debug view of the pending OTP for an address."""
    if not email:
        return _missing_email("Email is required")

    record = otp_manager.status(email)
    if record is None:
        return OTPStatusResponse(exists=False)

    return OTPStatusResponse(
        exists=True,
        expiry=record.expires_at,
        attempts=record.attempts,
        expired=otp_manager.is_expired(record),
    )


@router.get(
    "/email-previews", response_model=EmailPreviewsResponse, response_model_exclude_none=True
)
async def email_previews(
    email: str | None = Query(None),
    store: EmailPreviewStore = Depends(get_preview_store),
):
    """Latest simulated emails sent to an address."""
    try:
        entries = store.list_for(email)
    except ValueError:
        return _missing_email()

    return EmailPreviewsResponse(
        emails=[
            EmailPreviewItem(
                id=entry.preview.id,
                subject=entry.preview.subject,
                content=entry.preview.body,
                timestamp=entry.preview.timestamp_ms,
                time_ago=entry.time_ago,
                otp=entry.preview.code,
            )
            for entry in entries
        ]
    )


@router.get("/latest-otp")
async def latest_otp(
    email: str | None = Query(None),
    store: EmailPreviewStore = Depends(get_preview_store),
) -> dict:
    """Newest OTP emailed to an address, withheld once it is stale."""
    try:
        latest = store.latest_otp_for(email)
    except ValueError:
        return _missing_email()

    if latest.message is not None:
        return {"otp": None, "message": latest.message}
    if latest.expired:
        return {"otp": None, "expired": True, "timeAgo": latest.time_ago}
    return {"otp": latest.code, "expired": False, "timeAgo": latest.time_ago}
