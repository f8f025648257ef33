"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    name: str = Field(
        "Fintrax",
        description="Product name used in the welcome message and OpenAPI title",
    )
    version: str = Field(
        "0.0.1",
        description="Version reported by the API",
    )
    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_origins: str = Field(
        "*",
        description="Comma-separated list of origins allowed by CORS",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field(
        "json",
        description="Log format: json (structured) or plain",
    )
    output: str = Field(
        "stdout",
        description="Log destination: stdout or file",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output=file",
    )
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate the request id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Per-policy limits for the three rate limit gates.

    The values are policy, not algorithm: ``general`` guards resource routes,
    ``auth`` guards login/register/password routes and ``otp`` guards one-time
    code issuance.
    """

    enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    trust_forwarded_for: bool = Field(
        False,
        description="Use the first X-Forwarded-For hop as client address (only behind a trusted proxy)",
    )
    general_limit: int = Field(100, description="Requests per window for resource routes")
    general_window_seconds: float = Field(60.0, description="Window for resource routes")
    auth_limit: int = Field(5, description="Requests per window for authentication routes")
    auth_window_seconds: float = Field(60.0, description="Window for authentication routes")
    otp_limit: int = Field(3, description="Requests per window for OTP issuance")
    otp_window_seconds: float = Field(300.0, description="Window for OTP issuance")
    sweep_interval_seconds: float = Field(
        60.0,
        description="Interval between background sweeps of expired client windows",
    )
    shards: int = Field(
        16,
        description="Number of independently locked partitions per gate",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """Token and one-time-code configuration."""

    jwt_secret: str = Field(
        "change-me",
        description="HMAC secret used to sign access tokens",
    )
    jwt_algorithm: str = Field("HS256", description="JWT signing algorithm")
    token_ttl_seconds: int = Field(
        86_400,
        description="Access token lifetime in seconds",
        ge=1,
    )
    otp_ttl_minutes: int = Field(
        10,
        description="Minutes an issued OTP stays valid",
        ge=1,
    )
    otp_regeneration_minutes: int = Field(
        1,
        description="Minimum minutes between two OTP issuances for the same user",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
