"""Pydantic schemas for account, login and OTP endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _otp_as_text(value: Any) -> Any:
    # Clients send the code either as a JSON number or a string.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


OtpCode = Annotated[str, Field(pattern=r"^\d{6}$"), BeforeValidator(_otp_as_text)]


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(..., min_length=8, max_length=128)


class RegisterResponse(BaseModel):
    user_id: int
    username: str
    email: str
    token: str


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class LoginResponse(BaseModel):
    token: str
    user_id: int
    email: str
    username: str


class EmailRequest(BaseModel):
    """Body of ``generate-otp``."""

    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)


class VerifyEmailRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    otp: OtpCode = Field(
        ...,
        validation_alias=AliasChoices("otp", "OTP"),
        description="Six-digit code mailed at registration or by generate-otp.",
    )


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    otp: OtpCode = Field(..., validation_alias=AliasChoices("otp", "OTP"))
    password: str = Field(..., min_length=8, max_length=128, description="New password.")


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    old_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class TokenResponse(BaseModel):
    token: str
