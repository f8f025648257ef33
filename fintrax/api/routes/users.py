"""Account endpoints.

Login, registration and password routes share the strict ``auth`` gate;
OTP issuance has its own, stricter ``otp`` gate.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fintrax.api.deps import get_user_service
from fintrax.core.rate_limit import AUTH, OTP, rate_limited_route
from fintrax.core.responses import respond
from fintrax.core.security import CurrentUserId
from fintrax.schemas.user import (
    EmailRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    VerifyEmailRequest,
)
from fintrax.services.user_service import UserService

router = APIRouter(prefix="/user", tags=["User"], route_class=rate_limited_route(AUTH))
otp_router = APIRouter(route_class=rate_limited_route(OTP))

Users = Annotated[UserService, Depends(get_user_service)]


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, users: Users) -> JSONResponse:
    created = users.register(body.username, body.email, body.password)
    return respond(status.HTTP_201_CREATED, "User created successfully", created)


@router.post("/verify-email")
def verify_email(body: VerifyEmailRequest, users: Users) -> JSONResponse:
    users.verify_email(body.email, body.otp)
    return respond(status.HTTP_200_OK, "Email verified successfully")


@router.post("/login")
def login(body: LoginRequest, users: Users) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Login successful", users.login(body.email, body.password))


@otp_router.post("/generate-otp")
def generate_otp(body: EmailRequest, users: Users) -> JSONResponse:
    users.generate_otp(body.email)
    return respond(status.HTTP_200_OK, "OTP sent to your email successfully")


@router.post("/forgot-password")
def forgot_password(body: ForgotPasswordRequest, users: Users) -> JSONResponse:
    users.forgot_password(body.email, body.otp, body.password)
    return respond(status.HTTP_200_OK, "Password updated successfully")


@router.post("/reset-password")
def reset_password(body: ResetPasswordRequest, users: Users) -> JSONResponse:
    users.reset_password(body.email, body.old_password, body.new_password)
    return respond(status.HTTP_200_OK, "Password updated successfully")


@router.post("/refresh-token")
def refresh_token(user_id: CurrentUserId, users: Users) -> JSONResponse:
    token = users.refresh_token(user_id)
    return respond(status.HTTP_200_OK, "Token refreshed successfully", TokenResponse(token=token))


router.include_router(otp_router)
