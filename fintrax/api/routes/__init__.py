from __future__ import annotations

from fintrax.api.routes.dashboard import router as dashboard_router
from fintrax.api.routes.health import router as health_router
from fintrax.api.routes.savings import router as savings_router
from fintrax.api.routes.todos import router as todos_router
from fintrax.api.routes.users import router as users_router

__all__ = ["dashboard_router", "health_router", "savings_router", "todos_router", "users_router"]
