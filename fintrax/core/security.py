"""Password hashing and bearer-token authentication.

- Passwords are hashed with passlib (``pbkdf2_sha256``).
- Access tokens are HS256 JWTs (PyJWT) carrying ``user_id`` and ``exp``.
- ``get_current_user_id`` is the FastAPI dependency guarding resource routes.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from fintrax.core.config import AuthSettings, settings
from fintrax.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, auth_settings: AuthSettings | None = None) -> str:
    """Issue a signed access token for ``user_id``."""

    cfg = auth_settings or settings.auth
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=cfg.token_ttl_seconds)).timestamp()),
    }
    return jwt.encode(payload, cfg.jwt_secret, algorithm=cfg.jwt_algorithm)


def verify_token(token: str, auth_settings: AuthSettings | None = None) -> int:
    """Validate a token and return the user id it was issued for.

    Raises:
        AuthenticationAppError: If the token is expired, malformed, badly
            signed or lacks a ``user_id`` claim.
    """

    cfg = auth_settings or settings.auth
    try:
        payload = jwt.decode(token, cfg.jwt_secret, algorithms=[cfg.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationAppError(code="token_expired", message="Unauthorized") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationAppError(code="invalid_token", message="Unauthorized") from exc

    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise AuthenticationAppError(code="invalid_token", message="Unauthorized")
    return user_id


async def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> int:
    """FastAPI dependency resolving ``Authorization: Bearer <token>``.

    Usage:
        @router.get("/todo")
        async def list_todos(user_id: int = Depends(get_current_user_id)): ...

    Raises:
        AuthenticationAppError: 401 when the header is missing or invalid.
    """

    if credentials is None or not credentials.credentials:
        logger.info("auth.missing_token")
        raise AuthenticationAppError(code="missing_token", message="Unauthorized")

    try:
        return verify_token(credentials.credentials, request.app.state.settings.auth)
    except AuthenticationAppError as exc:
        logger.info("auth.rejected", extra={"reason": exc.code})
        raise


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
