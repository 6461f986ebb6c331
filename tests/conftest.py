"""Shared fixtures: a controllable clock and in-memory stores."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from thlight_panel.mail.preview_mailer import PreviewMailer
from thlight_panel.mail.preview_store import EmailPreviewStore
from thlight_panel.otp.manager import OTPManager


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def preview_store(clock: FakeClock) -> EmailPreviewStore:
    return EmailPreviewStore(clock=clock)


@pytest.fixture
def otp_manager(preview_store: EmailPreviewStore, clock: FakeClock) -> OTPManager:
    return OTPManager(mailer=PreviewMailer(preview_store), clock=clock)
