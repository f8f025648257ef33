"""Rate limiting for FastAPI routes.

This module wires the rate limit gates into the HTTP layer.

Design goals:
- Gate first: routers declare ``route_class=rate_limited_route(policy)``, so
  the gate decides before the request body is read or any dependency runs.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.
- Explicit composition: the gates are built once by the application factory
  and stored on ``app.state``; nothing here is a module-level singleton.

Three named policies exist:
- ``general``: resource routes (todos, savings, ...).
- ``auth``: login, registration and password routes.
- ``otp``: one-time code issuance.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator

from fastapi import Request, Response
from fastapi.routing import APIRoute

from fintrax.adapters.rate_limit.base import AbstractRateLimiter
from fintrax.adapters.rate_limit.in_memory import InMemoryRateLimitGate
from fintrax.core.config import RateLimitSettings
from fintrax.core.errors import RateLimitedAppError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."

GENERAL = "general"
AUTH = "auth"
OTP = "otp"

POLICIES = (GENERAL, AUTH, OTP)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Named ``(limit, window)`` pair for one gate."""

    name: str
    limit: int
    window_seconds: float


@dataclass
class RateLimiters:
    """The process-wide set of gates, one per policy."""

    general: AbstractRateLimiter
    auth: AbstractRateLimiter
    otp: AbstractRateLimiter
    enabled: bool = True
    trust_forwarded_for: bool = False

    def get(self, policy: str) -> AbstractRateLimiter:
        if policy not in POLICIES:
            raise KeyError(f"unknown rate limit policy: {policy}")
        return getattr(self, policy)

    def __iter__(self) -> Iterator[AbstractRateLimiter]:
        return iter(getattr(self, name) for name in POLICIES)

    def start(self) -> None:
        for gate in self:
            gate.start()

    def stop(self) -> None:
        for gate in self:
            gate.stop()


def policies_from_settings(cfg: RateLimitSettings) -> list[RateLimitPolicy]:
    """Read the three policies out of configuration."""

    return [
        RateLimitPolicy(GENERAL, cfg.general_limit, cfg.general_window_seconds),
        RateLimitPolicy(AUTH, cfg.auth_limit, cfg.auth_window_seconds),
        RateLimitPolicy(OTP, cfg.otp_limit, cfg.otp_window_seconds),
    ]


def build_rate_limiters(cfg: RateLimitSettings) -> RateLimiters:
    """Construct one in-memory gate per configured policy.

    Args:
        cfg: Rate limit settings.

    Returns:
        RateLimiters: Gates ready to be started.

    Raises:
        ConfigurationError: If any policy has a non-positive limit or window.
    """

    gates = {
        policy.name: InMemoryRateLimitGate(
            name=policy.name,
            limit=policy.limit,
            window_seconds=policy.window_seconds,
            sweep_interval_seconds=cfg.sweep_interval_seconds,
            shards=cfg.shards,
        )
        for policy in policies_from_settings(cfg)
    }
    return RateLimiters(
        enabled=cfg.enabled,
        trust_forwarded_for=cfg.trust_forwarded_for,
        **gates,
    )


def client_key(request: Request, *, trust_forwarded_for: bool = False) -> str:
    """Derive the limiter key (client address) for the current request.

    Args:
        request: FastAPI request.
        trust_forwarded_for: Use the first ``X-Forwarded-For`` hop if present.

    Returns:
        str: Client address, or ``"unknown"`` when the server cannot tell.
    """

    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def rate_limit(policy: str) -> Callable[[Request], None]:
    """Build a callable enforcing the named policy on a request.

    Usage:
        enforce = rate_limit(AUTH)
        enforce(request)  # raises RateLimitedAppError when rejected

    Args:
        policy: One of ``general``, ``auth`` or ``otp``.

    Returns:
        Callable raising ``RateLimitedAppError`` on rejection.
    """

    def enforce_rate_limit(request: Request) -> None:
        # Preflight requests carry no business payload and are never throttled.
        if request.method == "OPTIONS":
            return

        limiters: RateLimiters = request.app.state.rate_limiters
        if not limiters.enabled:
            return

        gate = limiters.get(policy)
        key = client_key(request, trust_forwarded_for=limiters.trust_forwarded_for)

        if gate.admit(key):
            logger.debug(
                "rate_limit.allowed",
                extra={"policy": policy, "key_hash": _hash_limiter_key(key)},
            )
            return

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "policy": policy,
                "key_hash": _hash_limiter_key(key),
                "path": request.url.path,
            },
        )
        raise RateLimitedAppError(code="rate_limited", message=RATE_LIMIT_MESSAGE)

    enforce_rate_limit.__name__ = f"enforce_{policy}_rate_limit"
    return enforce_rate_limit


def rate_limited_route(policy: str) -> type[APIRoute]:
    """Build an ``APIRoute`` class that admits requests through the named gate.

    The gate is consulted before the route handler parses the body or
    resolves dependencies, so malformed requests are counted and rejected
    like any other.

    Usage:
        router = APIRouter(prefix="/todo", route_class=rate_limited_route(GENERAL))
    """

    enforce = rate_limit(policy)

    class RateLimitedRoute(APIRoute):
        def get_route_handler(self) -> Callable[[Request], Awaitable[Response]]:
            handler = super().get_route_handler()

            async def gated_handler(request: Request) -> Response:
                enforce(request)
                return await handler(request)

            return gated_handler

    RateLimitedRoute.__name__ = RateLimitedRoute.__qualname__ = f"{policy.title()}RateLimitedRoute"
    return RateLimitedRoute
