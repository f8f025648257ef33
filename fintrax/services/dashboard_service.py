"""Per-user totals across todos and savings goals."""

from __future__ import annotations

from collections import Counter

from fintrax.schemas.common import Status
from fintrax.schemas.dashboard import DashboardSummary
from fintrax.schemas.savings import SavingsResponse
from fintrax.schemas.todo import TodoResponse
from fintrax.services.record_service import RecordService


class DashboardService:
    def __init__(
        self,
        *,
        todos: RecordService[TodoResponse],
        savings: RecordService[SavingsResponse],
    ) -> None:
        self._todos = todos
        self._savings = savings

    def summary(self, owner_id: int) -> DashboardSummary:
        """Aggregate the owner's live records; soft-deleted ones are excluded."""

        todos = self._todos.list(owner_id)
        goals = self._savings.list(owner_id)

        per_status = Counter(Status(todo.status) for todo in todos)
        saved = sum(goal.amount for goal in goals)
        target = sum(goal.target_amount for goal in goals)

        return DashboardSummary(
            total_todo=len(todos),
            completed_todo=per_status[Status.COMPLETED],
            todos_by_status={
                s.name.lower(): per_status[s] for s in Status if s is not Status.DELETED
            },
            total_savings=saved,
            total_savings_target=target,
            savings_progress=round(saved / target * 100, 2) if target else 0.0,
        )
