"""Standard JSON envelope returned by every endpoint.

Every response body, success or failure, has the same four keys::

    {"status": 200, "message": "...", "data": ..., "error": ...}
"""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(status_code: int, message: str, data: Any = None, error: Any = None) -> dict[str, Any]:
    """Build the envelope body without wrapping it in a response."""

    return {
        "status": status_code,
        "message": message,
        "data": jsonable_encoder(data),
        "error": jsonable_encoder(error),
    }


def respond(
    status_code: int,
    message: str,
    data: Any = None,
    error: Any = None,
    *,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Return a JSONResponse carrying the standard envelope.

    Args:
        status_code: HTTP status, echoed in the body.
        message: Human-readable outcome.
        data: Payload (pydantic models and datetimes are encoded).
        error: Error detail for failed requests.
        headers: Optional extra response headers.
    """

    return JSONResponse(
        status_code=status_code,
        content=envelope(status_code, message, data, error),
        headers=headers,
    )
