"""Todo (task) endpoints: general rate limit, then bearer authentication."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fintrax.api.deps import get_todo_service
from fintrax.core.rate_limit import GENERAL, rate_limited_route
from fintrax.core.responses import respond
from fintrax.core.security import CurrentUserId
from fintrax.schemas.todo import TodoCreate, TodoUpdate
from fintrax.services.record_service import RecordService

router = APIRouter(prefix="/todo", tags=["Todo"], route_class=rate_limited_route(GENERAL))

Todos = Annotated[RecordService, Depends(get_todo_service)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_todo(body: TodoCreate, user_id: CurrentUserId, todos: Todos) -> JSONResponse:
    return respond(status.HTTP_201_CREATED, "Todo created successfully", todos.create(user_id, body))


@router.get("")
def list_todos(
    user_id: CurrentUserId,
    todos: Todos,
    project_id: int | None = None,
    roadmap_id: int | None = None,
) -> JSONResponse:
    items = todos.list(user_id, project_id=project_id, roadmap_id=roadmap_id)
    return respond(status.HTTP_200_OK, "Todos fetched successfully", items)


@router.get("/{todo_id}")
def get_todo(todo_id: int, user_id: CurrentUserId, todos: Todos) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Todo fetched successfully", todos.get(user_id, todo_id))


@router.patch("/{todo_id}")
def update_todo(todo_id: int, body: TodoUpdate, user_id: CurrentUserId, todos: Todos) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Todo updated successfully", todos.update(user_id, todo_id, body))


@router.delete("/{todo_id}")
def delete_todo(todo_id: int, user_id: CurrentUserId, todos: Todos) -> JSONResponse:
    return respond(status.HTTP_200_OK, "Todo deleted successfully", todos.delete(user_id, todo_id))
