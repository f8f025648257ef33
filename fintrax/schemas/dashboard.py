"""Pydantic schema for the per-user dashboard summary."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DashboardSummary(BaseModel):
    total_todo: int
    completed_todo: int
    todos_by_status: dict[str, int] = Field(
        ..., description="Live todos per status name; deleted todos are not counted."
    )
    total_savings: float
    total_savings_target: float
    savings_progress: float = Field(..., description="Percent of the combined target saved so far.")
