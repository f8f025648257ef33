"""In-memory repositories.

Notes:
- Per-process only: data is lost on restart.
- Thread-safe: a single lock guards each store; operations are O(n) at worst
  and perform no I/O under the lock.
- Records are copied on the way in and out so callers never hold live state.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable

from fintrax.adapters.storage.base import AbstractRepository, AbstractUserStore, Record, User
from fintrax.core.errors import ConflictAppError
from fintrax.schemas.common import Status

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRepository(AbstractRepository):
    """Soft-deleting record store for one entity type."""

    def __init__(self, entity: str, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self.entity = entity
        self._clock = clock
        self._lock = threading.RLock()
        self._records: dict[int, Record] = {}
        self._ids = itertools.count(1)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryRepository(entity={self.entity!r}, size={len(self._records)})"

    def _visible(self, owner_id: int, record_id: int) -> Record | None:
        record = self._records.get(record_id)
        if record is None or record.owner_id != owner_id or record.status is Status.DELETED:
            return None
        return record

    def create(self, owner_id: int, fields: dict[str, Any], status: Status = Status.NOT_STARTED) -> Record:
        now = self._clock()
        with self._lock:
            record = Record(
                id=next(self._ids),
                owner_id=owner_id,
                status=Status(status),
                created_at=now,
                updated_at=now,
                fields=copy.deepcopy(fields),
            )
            self._records[record.id] = record
            logger.debug(
                "storage.created",
                extra={"entity": self.entity, "entity_id": record.id, "owner_id": owner_id},
            )
            return copy.deepcopy(record)

    def get(self, owner_id: int, record_id: int) -> Record | None:
        with self._lock:
            record = self._visible(owner_id, record_id)
            return copy.deepcopy(record) if record else None

    def list(self, owner_id: int, **filters: Any) -> list[Record]:
        with self._lock:
            matches = [
                record
                for record in self._records.values()
                if record.owner_id == owner_id
                and record.status is not Status.DELETED
                and all(record.fields.get(k) == v for k, v in filters.items())
            ]
            return [copy.deepcopy(r) for r in sorted(matches, key=lambda r: r.id)]

    def update(
        self,
        owner_id: int,
        record_id: int,
        changes: dict[str, Any],
        status: Status | None = None,
    ) -> Record | None:
        with self._lock:
            record = self._visible(owner_id, record_id)
            if record is None:
                return None
            record.fields.update(copy.deepcopy(changes))
            if status is not None:
                record.status = Status(status)
            record.updated_at = self._clock()
            return copy.deepcopy(record)

    def soft_delete(self, owner_id: int, record_id: int) -> Record | None:
        with self._lock:
            record = self._visible(owner_id, record_id)
            if record is None:
                return None
            now = self._clock()
            record.status = Status.DELETED
            record.deleted_at = now
            record.updated_at = now
            logger.info(
                "storage.soft_deleted",
                extra={"entity": self.entity, "entity_id": record_id, "owner_id": owner_id},
            )
            return copy.deepcopy(record)

    def count_all(self) -> int:
        """Number of stored records, deleted ones included."""
        with self._lock:
            return len(self._records)


class InMemoryUserStore(AbstractUserStore):
    """User accounts keyed by id with a unique, case-insensitive email index."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._by_email: dict[str, int] = {}
        self._ids = itertools.count(1)

    @staticmethod
    def _normalize(email: str) -> str:
        return email.strip().lower()

    def add(self, username: str, email: str, password_hash: str) -> User:
        key = self._normalize(email)
        with self._lock:
            if key in self._by_email:
                raise ConflictAppError(code="user_exists", message="User already exists")
            user = User(
                id=next(self._ids),
                username=username,
                email=email.strip(),
                password_hash=password_hash,
                created_at=self._clock(),
            )
            self._users[user.id] = user
            self._by_email[key] = user.id
            return copy.deepcopy(user)

    def get(self, user_id: int) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    def get_by_email(self, email: str) -> User | None:
        with self._lock:
            user_id = self._by_email.get(self._normalize(email))
            return copy.deepcopy(self._users[user_id]) if user_id is not None else None

    def save(self, user: User) -> None:
        with self._lock:
            if user.id not in self._users:
                raise KeyError(f"unknown user id {user.id}")
            self._users[user.id] = copy.deepcopy(user)
