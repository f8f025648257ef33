"""Account lifecycle: registration, email verification, login and OTP flows.

A new account starts INACTIVE with a six-digit one-time code mailed to it.
Verifying that code activates the account; only active accounts may log in.
The same code mechanism backs the forgot-password flow.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable

from fintrax.adapters.mail.base import AbstractMailer
from fintrax.adapters.storage.base import AbstractUserStore, User
from fintrax.core.config import AuthSettings
from fintrax.core.errors import (
    AuthenticationAppError,
    DeliveryAppError,
    ForbiddenAppError,
    NotFoundAppError,
    RateLimitedAppError,
    ValidationAppError,
)
from fintrax.core.security import create_access_token, hash_password, verify_password
from fintrax.schemas.common import UserStatus
from fintrax.schemas.user import LoginResponse, RegisterResponse

logger = logging.getLogger(__name__)


def generate_otp() -> str:
    """Return a uniformly random six-digit code (100000-999999)."""
    return str(secrets.randbelow(900_000) + 100_000)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """Business rules for the ``/api/user`` endpoints."""

    def __init__(
        self,
        *,
        users: AbstractUserStore,
        mailer: AbstractMailer,
        auth_settings: AuthSettings,
        app_name: str = "Fintrax",
        clock: Callable[[], datetime] = _utcnow,
        otp_factory: Callable[[], str] = generate_otp,
    ) -> None:
        self._users = users
        self._mailer = mailer
        self._auth = auth_settings
        self._app_name = app_name
        self._clock = clock
        self._otp_factory = otp_factory

    # -- helpers ---------------------------------------------------------

    def _require_user(self, email: str) -> User:
        user = self._users.get_by_email(email)
        if user is None:
            raise NotFoundAppError(code="user_not_found", message="User not found")
        return user

    def _issue_otp(self, user: User) -> str:
        otp = self._otp_factory()
        user.otp = otp
        user.otp_issued_at = self._clock()
        self._users.save(user)
        return otp

    def _otp_is_live(self, user: User) -> bool:
        if not user.otp or user.otp_issued_at is None:
            return False
        expires_at = user.otp_issued_at + timedelta(minutes=self._auth.otp_ttl_minutes)
        return self._clock() <= expires_at

    def _check_otp(self, user: User, otp: str) -> None:
        if not self._otp_is_live(user):
            raise ValidationAppError(code="otp_expired", message="OTP not generated or expired")
        if not hmac.compare_digest(user.otp or "", otp):
            logger.info("otp.mismatch", extra={"user_id": user.id})
            raise ValidationAppError(code="otp_invalid", message="Invalid OTP")

    def _send(self, to: str, subject: str, body: str) -> None:
        try:
            self._mailer.send(to, subject, body)
        except DeliveryAppError:
            raise
        except Exception as exc:
            logger.error(
                "mail.delivery_failed",
                extra={"recipient": to, "error_type": type(exc).__name__},
            )
            raise DeliveryAppError(code="mail_delivery_failed", message="Failed to send email") from exc

    # -- operations ------------------------------------------------------

    def register(self, username: str, email: str, password: str) -> RegisterResponse:
        """Create an inactive account and mail its verification code.

        Raises:
            ConflictAppError: Email already registered.
            DeliveryAppError: Verification email could not be sent.
        """
        user = self._users.add(username=username, email=email, password_hash=hash_password(password))
        otp = self._issue_otp(user)

        try:
            self._send(
                user.email,
                f"{self._app_name} - Verify Your Email",
                f"Welcome to {self._app_name}!\n\n"
                f"Your OTP for email verification is: {otp}\n\n"
                f"This OTP is valid for {self._auth.otp_ttl_minutes} minutes.\n\n"
                f"Please verify your email to start using {self._app_name}.",
            )
        except DeliveryAppError as exc:
            # The account stays INACTIVE; generate-otp can resend the code.
            raise DeliveryAppError(
                code=exc.code,
                message="User created but failed to send verification email",
            ) from exc
        logger.info("user.registered", extra={"user_id": user.id, "email": user.email})

        return RegisterResponse(
            user_id=user.id,
            username=user.username,
            email=user.email,
            token=create_access_token(user.id, self._auth),
        )

    def verify_email(self, email: str, otp: str) -> None:
        """Activate the account once the mailed code is confirmed."""
        user = self._require_user(email)
        self._check_otp(user, otp)

        user.status = UserStatus.ACTIVE
        user.otp = None
        user.otp_issued_at = None
        self._users.save(user)
        logger.info("user.verified", extra={"user_id": user.id})

    def login(self, email: str, password: str) -> LoginResponse:
        user = self._users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", extra={"email": email})
            raise AuthenticationAppError(code="invalid_credentials", message="Invalid credentials")

        if user.status is not UserStatus.ACTIVE:
            raise ForbiddenAppError(code="email_not_verified", message="Please verify Email first")

        logger.info("auth.login", extra={"user_id": user.id})
        return LoginResponse(
            token=create_access_token(user.id, self._auth),
            user_id=user.id,
            email=user.email,
            username=user.username,
        )

    def generate_otp(self, email: str) -> None:
        """Mail a fresh code, refusing if one was issued too recently.

        The code is never returned to the caller; it only travels by email.

        Raises:
            NotFoundAppError: Unknown email.
            RateLimitedAppError: A code was issued less than
                ``otp_regeneration_minutes`` ago.
        """
        user = self._require_user(email)

        cooldown = timedelta(minutes=self._auth.otp_regeneration_minutes)
        if user.otp and user.otp_issued_at and self._clock() - user.otp_issued_at < cooldown:
            raise RateLimitedAppError(
                code="otp_cooldown",
                message="OTP already generated, please wait before generating a new one",
            )

        otp = self._issue_otp(user)
        self._send(
            user.email,
            f"{self._app_name} - OTP for Password Reset",
            f"Your OTP for password reset is: {otp}\n\n"
            f"This OTP is valid for {self._auth.otp_ttl_minutes} minutes.\n\n"
            "If you did not request this, please ignore this email.",
        )
        logger.info("otp.issued", extra={"user_id": user.id})

    def forgot_password(self, email: str, otp: str, new_password: str) -> None:
        """Replace the password of a user proving control of their mailbox."""
        user = self._require_user(email)
        self._check_otp(user, otp)

        user.password_hash = hash_password(new_password)
        user.otp = None
        user.otp_issued_at = None
        self._users.save(user)
        logger.info("user.password_recovered", extra={"user_id": user.id})

    def reset_password(self, email: str, old_password: str, new_password: str) -> None:
        """Replace the password of a user who knows the current one."""
        user = self._require_user(email)
        if not verify_password(old_password, user.password_hash):
            raise AuthenticationAppError(code="invalid_credentials", message="Invalid credentials")

        user.password_hash = hash_password(new_password)
        self._users.save(user)
        logger.info("user.password_changed", extra={"user_id": user.id})

    def refresh_token(self, user_id: int) -> str:
        """Issue a new access token for a still-existing user."""
        if self._users.get(user_id) is None:
            raise AuthenticationAppError(code="unknown_user", message="Unauthorized")
        return create_access_token(user_id, self._auth)
