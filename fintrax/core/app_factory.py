"""Application factory for the FastAPI app.

This is the composition root: it builds the rate limit gates, repositories,
mailer and services once, hangs them on ``app.state`` and wires middleware,
exception handlers and routers around them. Nothing in the request path
constructs these objects per request.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fintrax.adapters.mail.base import AbstractMailer
from fintrax.adapters.mail.logging_mailer import LoggingMailer
from fintrax.adapters.storage.in_memory import InMemoryRepository, InMemoryUserStore
from fintrax.api.routes import dashboard_router, health_router, savings_router, todos_router, users_router
from fintrax.core.config import Settings
from fintrax.core.config import settings as default_settings
from fintrax.core.exception_handlers import setup_exception_handlers
from fintrax.core.logging import configure_logging
from fintrax.core.middleware import request_id_middleware
from fintrax.core.openapi import apply_openapi_customizations
from fintrax.core.rate_limit import RateLimiters, build_rate_limiters
from fintrax.services.dashboard_service import DashboardService
from fintrax.services.record_service import build_savings_service, build_todo_service
from fintrax.services.user_service import UserService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    limiters: RateLimiters = app.state.rate_limiters
    limiters.start()
    logger.info("app.started", extra={"env": app.state.settings.app_env})
    try:
        yield
    finally:
        limiters.stop()
        logger.info("app.stopped")


def create_app(
    settings: Settings | None = None,
    *,
    mailer: AbstractMailer | None = None,
    rate_limiters: RateLimiters | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to use; defaults to the environment-loaded ones.
        mailer: Outbound mail adapter; defaults to ``LoggingMailer``.
        rate_limiters: Prebuilt gates (tests inject fake-clock gates here).
        configure_logs: Configure root logging (disable when embedding).

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.

    Raises:
        ConfigurationError: If a rate limit policy is misconfigured.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log, debug=cfg.app.debug)

    # Fails fast on a bad (limit, window) before the app can serve traffic.
    limiters = rate_limiters or build_rate_limiters(cfg.rate_limit)

    app = FastAPI(
        title=f"{cfg.app.name} API",
        description=(
            "Personal finance and task tracking backend: savings goals and todos "
            "behind JWT authentication, with per-client rate limiting on every route."
        ),
        version=cfg.app.version,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.rate_limiters = limiters
    app.state.mailer = mailer or LoggingMailer()
    app.state.users = InMemoryUserStore()
    app.state.user_service = UserService(
        users=app.state.users,
        mailer=app.state.mailer,
        auth_settings=cfg.auth,
        app_name=cfg.app.name,
    )
    app.state.todo_service = build_todo_service(InMemoryRepository("todo"))
    app.state.savings_service = build_savings_service(InMemoryRepository("savings"))
    app.state.dashboard_service = DashboardService(
        todos=app.state.todo_service,
        savings=app.state.savings_service,
    )

    # Middleware: CORS is outermost so preflights are answered before routing.
    app.middleware("http")(request_id_middleware)
    origins = [o.strip() for o in cfg.app.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(users_router, prefix="/api")
    app.include_router(todos_router, prefix="/api")
    app.include_router(savings_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")

    apply_openapi_customizations(app)

    return app
