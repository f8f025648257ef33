"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. Every subclass maps to
one HTTP status in ``fintrax.core.exception_handlers``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Rate limit configuration errors fill ``field`` and ``policy``; missing
    records fill ``entity`` and ``entity_id``.
    """

    field: str
    policy: str
    entity: str
    entity_id: int


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationError(AppError):
    """Raised at startup when a component is built with invalid settings."""


class ValidationAppError(AppError):
    """Raised when input validation fails."""


class AuthenticationAppError(AppError):
    """Raised when a bearer token or credentials are rejected."""


class ForbiddenAppError(AppError):
    """Raised when an authenticated caller may not perform the action."""


class NotFoundAppError(AppError):
    """Raised when a record does not exist or has been soft-deleted."""


class ConflictAppError(AppError):
    """Raised when a write would violate a uniqueness rule."""


class RateLimitedAppError(AppError):
    """Raised at the HTTP boundary when a rate limit gate rejects a request."""


class DeliveryAppError(AppError):
    """Raised when an outbound notification (email) cannot be delivered."""
