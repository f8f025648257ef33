"""Dashboard endpoint: general rate limit, then bearer authentication."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fintrax.api.deps import get_dashboard_service
from fintrax.core.rate_limit import GENERAL, rate_limited_route
from fintrax.core.responses import respond
from fintrax.core.security import CurrentUserId
from fintrax.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], route_class=rate_limited_route(GENERAL))


@router.get("")
def get_dashboard(
    user_id: CurrentUserId,
    dashboard: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Dashboard retrieved successfully", dashboard.summary(user_id))
