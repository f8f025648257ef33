"""HTTP-level tests for the rate limit gates wired into the routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import FakeClock, make_settings
from fintrax.adapters.mail.logging_mailer import LoggingMailer
from fintrax.adapters.rate_limit.in_memory import InMemoryRateLimitGate
from fintrax.core.app_factory import create_app
from fintrax.core.config import RateLimitSettings
from fintrax.core.errors import ConfigurationError
from fintrax.core.rate_limit import RATE_LIMIT_MESSAGE, RateLimiters, build_rate_limiters, client_key


def _limiters(clock: FakeClock, *, general: int = 100, auth: int = 5, otp: int = 3, **kwargs) -> RateLimiters:
    return RateLimiters(
        general=InMemoryRateLimitGate(name="general", limit=general, window_seconds=60, clock=clock),
        auth=InMemoryRateLimitGate(name="auth", limit=auth, window_seconds=60, clock=clock),
        otp=InMemoryRateLimitGate(name="otp", limit=otp, window_seconds=300, clock=clock),
        **kwargs,
    )


def _app(limiters: RateLimiters) -> FastAPI:
    return create_app(make_settings(), mailer=LoggingMailer(), rate_limiters=limiters, configure_logs=False)


def _login(client: TestClient, **headers):
    return client.post(
        "/api/user/login",
        json={"email": "nobody@example.com", "password": "whatever"},
        headers=headers,
    )


def test_sixth_auth_request_gets_429_envelope(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock)))

    statuses = [_login(client).status_code for _ in range(5)]
    rejected = _login(client)

    assert statuses == [401] * 5
    assert rejected.status_code == 429
    assert rejected.json() == {
        "status": 429,
        "message": RATE_LIMIT_MESSAGE,
        "data": None,
        "error": None,
    }


def test_rejection_has_no_retry_hints(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, auth=1)))
    _login(client)

    rejected = _login(client)

    assert rejected.status_code == 429
    assert "Retry-After" not in rejected.headers
    assert not any(h.lower().startswith("x-ratelimit") for h in rejected.headers)


def test_auth_window_reset_readmits_client(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, auth=1)))
    assert _login(client).status_code == 401
    assert _login(client).status_code == 429

    fake_clock.advance(61)

    assert _login(client).status_code == 401


def test_policies_are_independent(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, auth=1, otp=1)))
    _login(client)
    assert _login(client).status_code == 429

    resp = client.post("/api/user/generate-otp", json={"email": "nobody@example.com"})

    assert resp.status_code == 404


def test_otp_gate_allows_three_per_window(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock)))

    statuses = [
        client.post("/api/user/generate-otp", json={"email": "nobody@example.com"}).status_code
        for _ in range(4)
    ]

    assert statuses == [404, 404, 404, 429]


def test_general_gate_runs_before_authentication(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, general=2)))

    statuses = [client.get("/api/todo").status_code for _ in range(3)]

    assert statuses == [401, 401, 429]


def test_preflight_requests_are_never_throttled(fake_clock: FakeClock) -> None:
    limiters = _limiters(fake_clock, auth=1)
    client = TestClient(_app(limiters))
    _login(client)

    for _ in range(10):
        resp = client.options(
            "/api/user/login",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
        )
        assert resp.status_code == 200

    assert limiters.auth.size() == 1


def test_forwarded_for_is_ignored_unless_trusted(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, auth=1)))
    _login(client, **{"X-Forwarded-For": "203.0.113.1"})

    assert _login(client, **{"X-Forwarded-For": "203.0.113.2"}).status_code == 429


def test_forwarded_for_keys_clients_when_trusted(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, auth=1, trust_forwarded_for=True)))
    _login(client, **{"X-Forwarded-For": "203.0.113.1, 10.0.0.1"})

    assert _login(client, **{"X-Forwarded-For": "203.0.113.1"}).status_code == 429
    assert _login(client, **{"X-Forwarded-For": "203.0.113.2"}).status_code == 401


def test_disabled_rate_limiting_admits_everything(fake_clock: FakeClock) -> None:
    limiters = _limiters(fake_clock, auth=1, enabled=False)
    client = TestClient(_app(limiters))

    statuses = [_login(client).status_code for _ in range(5)]

    assert statuses == [401] * 5
    assert limiters.auth.size() == 0


def test_health_is_not_rate_limited(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, general=1)))

    statuses = {client.get("/health").status_code for _ in range(5)}

    assert statuses == {200}


def test_client_key_falls_back_to_unknown() -> None:
    class _Req:
        headers: dict = {}
        client = None

    assert client_key(_Req()) == "unknown"


def test_build_rate_limiters_uses_configured_policies() -> None:
    limiters = build_rate_limiters(RateLimitSettings())

    assert (limiters.general.limit, limiters.general.window_seconds) == (100, 60)
    assert (limiters.auth.limit, limiters.auth.window_seconds) == (5, 60)
    assert (limiters.otp.limit, limiters.otp.window_seconds) == (3, 300)


def test_misconfigured_policy_fails_app_startup() -> None:
    with pytest.raises(ConfigurationError):
        create_app(make_settings(otp_limit=0), configure_logs=False)


def test_unknown_policy_name_is_a_key_error(fake_clock: FakeClock) -> None:
    with pytest.raises(KeyError):
        _limiters(fake_clock).get("admin")


def _login_raw(client: TestClient, body: bytes):
    return client.post("/api/user/login", content=body, headers={"Content-Type": "application/json"})


def test_malformed_body_is_rejected_once_quota_is_spent(fake_clock: FakeClock) -> None:
    limiters = _limiters(fake_clock, auth=1)
    client = TestClient(_app(limiters))
    assert _login(client).status_code == 401

    rejected = _login_raw(client, b"{not json")

    assert rejected.status_code == 429
    assert rejected.json() == {
        "status": 429,
        "message": RATE_LIMIT_MESSAGE,
        "data": None,
        "error": None,
    }
    assert limiters.auth.size() == 1


def test_malformed_body_counts_against_quota(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, auth=1)))

    statuses = [_login_raw(client, b"{not json").status_code, _login(client).status_code]

    assert statuses == [400, 429]


def test_gate_runs_before_body_validation_on_resource_routes(fake_clock: FakeClock) -> None:
    client = TestClient(_app(_limiters(fake_clock, general=1)))
    client.get("/api/todo")

    resp = client.post("/api/todo", content=b"[", headers={"Content-Type": "application/json"})

    assert resp.status_code == 429


def test_dashboard_uses_general_gate(fake_clock: FakeClock) -> None:
    limiters = _limiters(fake_clock, general=1)
    client = TestClient(_app(limiters))

    statuses = [client.get("/api/dashboard").status_code for _ in range(2)]

    assert statuses == [401, 429]
    assert limiters.general.size() == 1
