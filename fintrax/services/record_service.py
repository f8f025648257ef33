"""Owner-scoped CRUD for todos and savings goals.

Both entities follow the same lifecycle: created with a writable status,
updated partially, and soft-deleted (status DELETED) so they vanish from
every read while staying stored.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel

from fintrax.adapters.storage.base import AbstractRepository, Record
from fintrax.core.errors import NotFoundAppError
from fintrax.schemas.common import Status
from fintrax.schemas.savings import SavingsResponse
from fintrax.schemas.todo import TodoResponse

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class RecordService(Generic[ResponseT]):
    """CRUD over one repository, converting records to response schemas.

    Args:
        repository: Backing store for the entity.
        label: Capitalised entity name used in messages ("Todo", "Savings").
        to_response: Converts a stored record to the response schema.
        nullable: Fields an update may explicitly clear with null.
    """

    def __init__(
        self,
        repository: AbstractRepository,
        *,
        label: str,
        to_response: Callable[[Record], ResponseT],
        nullable: frozenset[str] = frozenset(),
    ) -> None:
        self._repository = repository
        self.label = label
        self._to_response = to_response
        self._nullable = nullable

    def _not_found(self, record_id: int) -> NotFoundAppError:
        return NotFoundAppError(
            code="not_found",
            message=f"{self.label} not found",
            details={"entity": self.label.lower(), "entity_id": record_id},
        )

    def create(self, owner_id: int, payload: BaseModel) -> ResponseT:
        fields = payload.model_dump()
        status = Status(fields.pop("status"))
        record = self._repository.create(owner_id, fields, status=status)
        logger.info(
            "record.created",
            extra={"entity": self.label.lower(), "entity_id": record.id, "owner_id": owner_id},
        )
        return self._to_response(record)

    def list(self, owner_id: int, **filters: Any) -> list[ResponseT]:
        active = {k: v for k, v in filters.items() if v is not None}
        return [self._to_response(r) for r in self._repository.list(owner_id, **active)]

    def get(self, owner_id: int, record_id: int) -> ResponseT:
        record = self._repository.get(owner_id, record_id)
        if record is None:
            raise self._not_found(record_id)
        return self._to_response(record)

    def update(self, owner_id: int, record_id: int, payload: BaseModel) -> ResponseT:
        changes = {
            k: v
            for k, v in payload.model_dump(exclude_unset=True).items()
            if v is not None or k in self._nullable
        }
        status = changes.pop("status", None)
        record = self._repository.update(
            owner_id,
            record_id,
            changes,
            status=Status(status) if status is not None else None,
        )
        if record is None:
            raise self._not_found(record_id)
        return self._to_response(record)

    def delete(self, owner_id: int, record_id: int) -> ResponseT:
        record = self._repository.soft_delete(owner_id, record_id)
        if record is None:
            raise self._not_found(record_id)
        return self._to_response(record)


def todo_response(record: Record) -> TodoResponse:
    return TodoResponse(task_id=record.id, status=int(record.status), **record.fields)


def savings_response(record: Record) -> SavingsResponse:
    return SavingsResponse(
        saving_id=record.id,
        user_id=record.owner_id,
        status=int(record.status),
        created_at=record.created_at,
        updated_at=record.updated_at,
        **record.fields,
    )


def build_todo_service(repository: AbstractRepository) -> RecordService[TodoResponse]:
    return RecordService(
        repository,
        label="Todo",
        to_response=todo_response,
        nullable=frozenset({"start_date", "end_date", "parent_id", "project_id", "roadmap_id"}),
    )


def build_savings_service(repository: AbstractRepository) -> RecordService[SavingsResponse]:
    return RecordService(repository, label="Savings", to_response=savings_response)

