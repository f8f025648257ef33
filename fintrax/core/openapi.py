"""OpenAPI metadata and customization utilities.

Enriches the generated schema with:
- Tags metadata
- Bearer (JWT) security scheme, required by default
- Per-path exemptions for public endpoints (health, login, register, OTP)

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

# Paths reachable without a bearer token
PUBLIC_PATH_SUFFIXES = (
    "/health",
    "/user/register",
    "/user/verify-email",
    "/user/login",
    "/user/generate-otp",
    "/user/forgot-password",
    "/user/reset-password",
)

TAGS = [
    {"name": "User", "description": "Registration, login, email verification and passwords."},
    {"name": "Todo", "description": "Tasks with priorities, dates and optional roadmap/project links."},
    {"name": "Savings", "description": "Savings goals and progress towards a target amount."},
    {"name": "Dashboard", "description": "Per-user totals across todos and savings goals."},
    {"name": "Health", "description": "Liveness checks."},
]


def _is_public(path: str) -> bool:
    return path == "/" or path.endswith(PUBLIC_PATH_SUFFIXES)


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and bearer security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Access token from /api/user/login or /api/user/register.",
            },
        )
        schema.setdefault("security", [{"BearerAuth": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        tags.extend(tag for tag in TAGS if tag["name"] not in existing_tag_names)

        for path, methods in schema.get("paths", {}).items():
            if not _is_public(path):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = []

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
