"""FastAPI dependencies resolving services built by the application factory."""

from __future__ import annotations

from fastapi import Request

from fintrax.services.dashboard_service import DashboardService
from fintrax.services.record_service import RecordService
from fintrax.services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_todo_service(request: Request) -> RecordService:
    return request.app.state.todo_service


def get_savings_service(request: Request) -> RecordService:
    return request.app.state.savings_service


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service
