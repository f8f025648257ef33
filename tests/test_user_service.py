"""Unit tests for the account/OTP business rules."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from fintrax.adapters.mail.logging_mailer import LoggingMailer
from fintrax.adapters.storage.in_memory import InMemoryUserStore
from fintrax.core.config import AuthSettings
from fintrax.core.errors import (
    AuthenticationAppError,
    ConflictAppError,
    DeliveryAppError,
    ForbiddenAppError,
    NotFoundAppError,
    RateLimitedAppError,
    ValidationAppError,
)
from fintrax.core.security import verify_token
from fintrax.schemas.common import UserStatus
from fintrax.services.user_service import UserService, generate_otp

AUTH = AuthSettings(jwt_secret="unit-test-secret", otp_ttl_minutes=10, otp_regeneration_minutes=1)
EMAIL = "jane@example.com"


class FakeNow:
    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def now() -> FakeNow:
    return FakeNow()


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def codes() -> list[str]:
    return ["111111", "222222", "333333", "444444"]


@pytest.fixture
def service(store: InMemoryUserStore, now: FakeNow, codes: list[str]) -> UserService:
    pending = iter(codes)
    return UserService(
        users=store,
        mailer=LoggingMailer(),
        auth_settings=AUTH,
        clock=now,
        otp_factory=lambda: next(pending),
    )


def test_generate_otp_is_six_digits() -> None:
    for _ in range(100):
        code = generate_otp()
        assert len(code) == 6 and code.isdigit() and code[0] != "0"


def test_register_creates_inactive_user_with_token(service: UserService, store: InMemoryUserStore) -> None:
    created = service.register("jane", EMAIL, "s3cret-pass")

    assert verify_token(created.token, AUTH) == created.user_id
    assert store.get_by_email(EMAIL).status is UserStatus.INACTIVE


def test_register_duplicate_email_conflicts(service: UserService) -> None:
    service.register("jane", EMAIL, "s3cret-pass")

    with pytest.raises(ConflictAppError):
        service.register("jane2", EMAIL, "s3cret-pass")


def test_register_reports_mail_failure(store: InMemoryUserStore) -> None:
    mailer = Mock()
    mailer.send.side_effect = OSError("smtp down")
    service = UserService(users=store, mailer=mailer, auth_settings=AUTH)

    with pytest.raises(DeliveryAppError) as exc_info:
        service.register("jane", EMAIL, "s3cret-pass")

    assert exc_info.value.message == "User created but failed to send verification email"


def test_login_requires_verified_email(service: UserService) -> None:
    service.register("jane", EMAIL, "s3cret-pass")

    with pytest.raises(ForbiddenAppError):
        service.login(EMAIL, "s3cret-pass")

    service.verify_email(EMAIL, "111111")
    assert service.login(EMAIL, "s3cret-pass").email == EMAIL


def test_login_rejects_bad_credentials(service: UserService) -> None:
    service.register("jane", EMAIL, "s3cret-pass")
    service.verify_email(EMAIL, "111111")

    with pytest.raises(AuthenticationAppError):
        service.login(EMAIL, "wrong-pass")
    with pytest.raises(AuthenticationAppError):
        service.login("ghost@example.com", "s3cret-pass")


def test_verify_email_rejects_wrong_code(service: UserService) -> None:
    service.register("jane", EMAIL, "s3cret-pass")

    with pytest.raises(ValidationAppError) as exc_info:
        service.verify_email(EMAIL, "999999")

    assert exc_info.value.message == "Invalid OTP"


def test_verify_email_rejects_expired_code(service: UserService, now: FakeNow) -> None:
    service.register("jane", EMAIL, "s3cret-pass")
    now.advance(minutes=11)

    with pytest.raises(ValidationAppError) as exc_info:
        service.verify_email(EMAIL, "111111")

    assert exc_info.value.message == "OTP not generated or expired"


def test_code_is_single_use(service: UserService) -> None:
    service.register("jane", EMAIL, "s3cret-pass")
    service.verify_email(EMAIL, "111111")

    with pytest.raises(ValidationAppError):
        service.verify_email(EMAIL, "111111")


def test_generate_otp_unknown_user(service: UserService) -> None:
    with pytest.raises(NotFoundAppError):
        service.generate_otp("ghost@example.com")


def test_generate_otp_enforces_cooldown(service: UserService, now: FakeNow) -> None:
    service.register("jane", EMAIL, "s3cret-pass")

    with pytest.raises(RateLimitedAppError):
        service.generate_otp(EMAIL)

    now.advance(minutes=1)
    service.generate_otp(EMAIL)


def test_forgot_password_needs_matching_code(service: UserService, now: FakeNow) -> None:
    service.register("jane", EMAIL, "s3cret-pass")
    service.verify_email(EMAIL, "111111")
    service.generate_otp(EMAIL)

    with pytest.raises(ValidationAppError):
        service.forgot_password(EMAIL, "000000", "brand-new-pass")

    service.forgot_password(EMAIL, "222222", "brand-new-pass")
    assert service.login(EMAIL, "brand-new-pass").email == EMAIL


def test_reset_password_checks_old_password(service: UserService) -> None:
    service.register("jane", EMAIL, "s3cret-pass")
    service.verify_email(EMAIL, "111111")

    with pytest.raises(AuthenticationAppError):
        service.reset_password(EMAIL, "not-it", "brand-new-pass")

    service.reset_password(EMAIL, "s3cret-pass", "brand-new-pass")
    assert service.login(EMAIL, "brand-new-pass").user_id == 1


def test_refresh_token_for_unknown_user_fails(service: UserService) -> None:
    with pytest.raises(AuthenticationAppError):
        service.refresh_token(99)
