"""Tests for the panel HTTP API — status codes and response shapes."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from thlight_panel.api.router import get_otp_manager, get_preview_store
from thlight_panel.main import app

EMAIL = "player.one@gmail.com"


@pytest.fixture
def client(otp_manager, preview_store):
    """Test client wired to stores driven by the fake clock."""
    app.dependency_overrides[get_otp_manager] = lambda: otp_manager
    app.dependency_overrides[get_preview_store] = lambda: preview_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _send(client: TestClient, email: str = EMAIL, purpose: str = "reset"):
    return client.post("/api/send-otp", json={"email": email, "purpose": purpose})


def _latest_code(client: TestClient, email: str = EMAIL) -> str:
    return client.get("/api/latest-otp", params={"email": email}).json()["otp"]


# ──────────────────────────────────────────────────────────
# /api/validate-email
# ──────────────────────────────────────────────────────────
def test_validate_email_ok(client):
    resp = client.post("/api/validate-email", json={"email": EMAIL})
    assert resp.status_code == 200
    assert resp.json() == {"isValid": True, "message": "Email is valid"}


def test_validate_email_rejected(client):
    resp = client.post("/api/validate-email", json={"email": "player@yahoo.com"})
    assert resp.status_code == 400
    assert resp.json()["isValid"] is False


def test_validate_email_missing(client):
    resp = client.post("/api/validate-email", json={})
    assert resp.status_code == 400
    assert resp.json() == {"isValid": False, "message": "Email is required"}


def test_validate_email_non_string(client):
    resp = client.post("/api/validate-email", json={"email": 123})
    assert resp.status_code == 400
    assert resp.json() == {"isValid": False, "message": "Email is required"}


def test_validate_email_without_body(client):
    resp = client.post("/api/validate-email")
    assert resp.status_code == 400
    assert resp.json() == {"isValid": False, "message": "Email is required"}


def test_malformed_body_is_a_client_error(client):
    resp = client.post("/api/send-otp", json={"email": ["not", "a", "string"]})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


# ──────────────────────────────────────────────────────────
# /api/send-otp + /api/verify-otp
# ──────────────────────────────────────────────────────────
def test_send_otp_requires_email(client):
    resp = client.post("/api/send-otp", json={"purpose": "reset"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Email is required"}


def test_reset_flow_end_to_end(client):
    resp = _send(client)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    code = _latest_code(client)
    assert code is not None and len(code) == 6

    wrong = client.post("/api/verify-otp", json={"email": EMAIL, "otp": "000000"})
    assert wrong.status_code == 400
    assert wrong.json()["message"] == "Incorrect OTP. 2 attempts remaining."

    ok = client.post("/api/verify-otp", json={"email": EMAIL, "otp": code})
    assert ok.status_code == 200
    assert ok.json() == {"success": True, "message": "OTP verified successfully"}

    again = client.post("/api/verify-otp", json={"email": EMAIL, "otp": code})
    assert again.status_code == 400
    assert "No OTP found" in again.json()["message"]


def test_send_otp_accepts_any_purpose_label(client, preview_store):
    resp = client.post("/api/send-otp", json={"email": EMAIL, "purpose": 5})
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    entries = preview_store.list_for(EMAIL)
    assert "Verification" in entries[0].preview.subject


def test_verify_otp_requires_both_fields(client):
    resp = client.post("/api/verify-otp", json={"email": EMAIL})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email and OTP are required"


def test_verify_expired(client, clock):
    _send(client)
    code = _latest_code(client)
    clock.advance(minutes=6)

    resp = client.post("/api/verify-otp", json={"email": EMAIL, "otp": code})
    assert resp.status_code == 400
    assert "expired" in resp.json()["message"]


# ──────────────────────────────────────────────────────────
# /api/otp-status
# ──────────────────────────────────────────────────────────
def test_otp_status(client, clock):
    assert client.get("/api/otp-status", params={"email": EMAIL}).json() == {"exists": False}

    _send(client)
    client.post("/api/verify-otp", json={"email": EMAIL, "otp": "000000"})
    body = client.get("/api/otp-status", params={"email": EMAIL}).json()
    assert body["exists"] is True
    assert body["attempts"] == 1
    assert body["expired"] is False
    assert "expiry" in body

    clock.advance(minutes=10)
    body = client.get("/api/otp-status", params={"email": EMAIL}).json()
    assert body["exists"] is True
    assert body["expired"] is True


def test_otp_status_requires_email(client):
    resp = client.get("/api/otp-status")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email is required"}


# ──────────────────────────────────────────────────────────
# /api/email-previews + /api/latest-otp
# ──────────────────────────────────────────────────────────
def test_email_previews_shape(client, preview_store, clock):
    _send(client)
    preview_store.record(EMAIL, "Welcome to THLIGHT", "Your server is ready")
    clock.advance(seconds=90)

    resp = client.get("/api/email-previews", params={"email": EMAIL.upper()})
    assert resp.status_code == 200
    emails = resp.json()["emails"]
    assert len(emails) == 2

    welcome, otp_mail = emails
    assert welcome["subject"] == "Welcome to THLIGHT"
    assert "otp" not in welcome
    assert welcome["timeAgo"] == "1 minute ago"
    assert set(otp_mail) == {"id", "subject", "content", "timestamp", "timeAgo", "otp"}
    assert otp_mail["otp"] in otp_mail["content"]
    assert isinstance(otp_mail["timestamp"], int)


def test_email_previews_requires_email(client):
    resp = client.get("/api/email-previews")
    assert resp.status_code == 400


def test_latest_otp_states(client, clock):
    body = client.get("/api/latest-otp", params={"email": EMAIL}).json()
    assert body == {"otp": None, "message": "No OTP found"}

    _send(client)
    body = client.get("/api/latest-otp", params={"email": EMAIL}).json()
    assert body["otp"] is not None
    assert body["timeAgo"] == "0 second ago"

    clock.advance(minutes=5)
    body = client.get("/api/latest-otp", params={"email": EMAIL}).json()
    assert body["otp"] is None
    assert body["expired"] is True


def test_latest_otp_still_reported_after_redeem(client):
    # The preview store does not know the code was consumed
    _send(client)
    code = _latest_code(client)
    client.post("/api/verify-otp", json={"email": EMAIL, "otp": code})

    assert _latest_code(client) == code


def test_latest_otp_requires_email(client):
    resp = client.get("/api/latest-otp")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email parameter is required"}


def test_ping(client):
    resp = client.get("/api/ping")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
