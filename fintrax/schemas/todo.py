"""Pydantic schemas for todos (tasks)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from fintrax.schemas.common import Status, WritableStatus


class TodoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=1000)
    is_roadmap: bool = False
    priority: int = Field(5, ge=0, le=5)
    due_days: int = Field(0, ge=0, description="Days required to complete the task.")
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: WritableStatus = int(Status.NOT_STARTED)
    parent_id: int | None = None
    project_id: int | None = None
    roadmap_id: int | None = None


class TodoUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    is_roadmap: bool | None = None
    priority: int | None = Field(None, ge=0, le=5)
    due_days: int | None = Field(None, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: WritableStatus | None = None
    parent_id: int | None = None
    project_id: int | None = None
    roadmap_id: int | None = None


class TodoResponse(BaseModel):
    task_id: int
    title: str
    description: str
    is_roadmap: bool
    priority: int
    due_days: int
    start_date: datetime | None
    end_date: datetime | None
    status: int
    parent_id: int | None
    project_id: int | None
    roadmap_id: int | None
