"""OTP email wording, selected by purpose."""

from __future__ import annotations

from enum import Enum


class Purpose(str, Enum):
    """Why an OTP was requested.  Only affects the email wording."""

    REGISTER = "register"
    LOGIN = "login"
    RESET = "reset"
    VERIFICATION = "verification"

    @classmethod
    def parse(cls, value: object) -> Purpose:
        """Map a caller-supplied label to a purpose, defaulting to verification."""
        if not isinstance(value, str):
            return cls.VERIFICATION
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.VERIFICATION


# purpose → (subject title, phrase used in the body)
_WORDING: dict[Purpose, tuple[str, str]] = {
    Purpose.REGISTER: ("Registration", "registration"),
    Purpose.LOGIN: ("Login", "login"),
    Purpose.RESET: ("Password Reset", "password reset"),
    Purpose.VERIFICATION: ("Verification", "verification"),
}


def render_otp_email(
    purpose: Purpose, code: str, ttl_minutes: int, app_name: str
) -> tuple[str, str]:
    """Return ``(subject, body)`` for an OTP email."""
    title, phrase = _WORDING[purpose]
    subject = f"{app_name} - Your {title} Code"
    body = (
        "Dear User,\n\n"
        f"You have requested a {phrase} code for your {app_name} account.\n\n"
        f"Your verification code is: {code}\n\n"
        f"This code will expire in {ttl_minutes} minute{'s' if ttl_minutes != 1 else ''}.\n\n"
        "If you didn't request this code, please ignore this email.\n\n"
        "Best regards,\n"
        f"{app_name} Team"
    )
    return subject, body
