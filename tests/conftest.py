"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any ``fintrax`` import so that the
settings object is built from test values.
"""

import os
import re

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fintrax.adapters.mail.logging_mailer import LoggingMailer
from fintrax.core.app_factory import create_app
from fintrax.core.config import AuthSettings, RateLimitSettings, Settings


class FakeClock:
    """Deterministic monotonic clock for window arithmetic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def make_settings(**rate_limit_overrides) -> Settings:
    """Settings with generous limits so functional tests are never throttled."""

    rate_limit = {
        "general_limit": 1000,
        "auth_limit": 1000,
        "otp_limit": 1000,
        **rate_limit_overrides,
    }
    return Settings(
        rate_limit=RateLimitSettings(**rate_limit),
        auth=AuthSettings(jwt_secret="test-secret-key", otp_regeneration_minutes=0),
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mailer() -> LoggingMailer:
    return LoggingMailer()


@pytest.fixture
def app(mailer: LoggingMailer) -> FastAPI:
    return create_app(make_settings(), mailer=mailer, configure_logs=False)


@pytest.fixture
def client(app: FastAPI):
    with TestClient(app) as test_client:
        yield test_client


def otp_from(mailer: LoggingMailer, email: str) -> str:
    message = mailer.last_to(email)
    assert message is not None, f"no mail sent to {email}"
    match = re.search(r"\b(\d{6})\b", message.body)
    assert match, "mail body carries no OTP"
    return match.group(1)


def register_active_user(
    client: TestClient,
    mailer: LoggingMailer,
    email: str = "jane@example.com",
    password: str = "s3cret-pass",
) -> dict[str, str]:
    """Register, verify and log in a user; return bearer auth headers."""

    resp = client.post(
        "/api/user/register",
        json={"username": email.split("@")[0], "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text

    resp = client.post("/api/user/verify-email", json={"email": email, "otp": otp_from(mailer, email)})
    assert resp.status_code == 200, resp.text

    resp = client.post("/api/user/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@pytest.fixture
def auth_headers(client: TestClient, mailer: LoggingMailer) -> dict[str, str]:
    return register_active_user(client, mailer)
