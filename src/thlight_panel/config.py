"""THLIGHT Panel API — configuration loaded from environment."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── OTP ───────────────────────────────────────────────
    otp_ttl_seconds: int = 300
    otp_max_attempts: int = 3
    # 0 disables the background sweep; expiry is still checked on read
    otp_sweep_interval_seconds: float = 0

    # ── Email previews ────────────────────────────────────
    preview_capacity: int = 10
    preview_list_limit: int = 5

    # ── Email validation ──────────────────────────────────
    allowed_email_domain: str = "gmail.com"

    # ── Mail delivery ─────────────────────────────────────
    mail_backend: Literal["preview", "smtp"] = "preview"
    mail_delay_seconds: float = 0
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    email_from: str = "noreply@thlight.panel"

    # ── API client ────────────────────────────────────────
    api_base_url: str = "http://localhost:8000/api"

    # ── App ───────────────────────────────────────────────
    app_name: str = "THLIGHT Panel"
    debug: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
