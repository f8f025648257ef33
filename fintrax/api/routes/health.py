from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from fintrax.core.rate_limit import POLICIES
from fintrax.core.responses import respond

router = APIRouter(tags=["Health"])


@router.get("/")
def welcome(request: Request) -> JSONResponse:
    """Greeting used by the frontend to check the API is reachable."""

    name = request.app.state.settings.app.name
    return respond(200, f"Welcome to {name} API")


@router.get("/health")
def health_check(request: Request) -> JSONResponse:
    """Health check endpoint.

    Reports liveness plus the number of client windows each rate limit gate
    currently tracks. Not rate limited, so probes are never throttled.
    """

    limiters = request.app.state.rate_limiters
    tracked = {name: limiters.get(name).size() for name in POLICIES}
    return respond(200, "ok", data={"status": "ok", "rate_limit_tracked_clients": tracked})
