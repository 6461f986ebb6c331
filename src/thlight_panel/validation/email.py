"""Email address checks used by the registration and reset forms."""

from __future__ import annotations

import re
from dataclasses import dataclass

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Local-part fragments that mark an address as obviously made up
FAKE_TOKENS = ("test123", "fake123", "invalid123", "notreal123", "temporary123")


@dataclass(frozen=True)
class EmailValidation:
    is_valid: bool
    message: str


def _looks_fake(local: str) -> bool:
    return (
        any(token in local for token in FAKE_TOKENS)
        or ".." in local
        or local.startswith(".")
        or local.endswith(".")
        or len(local) < 2
    )


def validate_email(email: object, allowed_domain: str = "gmail.com") -> EmailValidation:
    """Accept only well-formed, plausible addresses on *allowed_domain*."""
    if not email or not isinstance(email, str):
        return EmailValidation(False, "Email is required")

    if not _EMAIL_RE.match(email):
        return EmailValidation(False, "Invalid email format")

    provider = allowed_domain.split(".")[0].capitalize()
    if not email.lower().endswith(f"@{allowed_domain.lower()}"):
        return EmailValidation(
            False, f"Email is invalid. Only real {provider} accounts are supported."
        )

    local = email.split("@")[0].lower()
    if _looks_fake(local):
        return EmailValidation(
            False, f"Email is invalid. Please enter a valid {provider} address."
        )

    return EmailValidation(True, "Email is valid")
