"""Repository interfaces for owner-scoped records and user accounts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fintrax.schemas.common import Status, UserStatus


@dataclass
class Record:
    """A stored domain entity.

    Attributes:
        id: Repository-assigned identifier, unique per repository.
        owner_id: User who owns the record.
        status: Lifecycle status; ``Status.DELETED`` hides the record.
        fields: Entity-specific attributes.
    """

    id: int
    owner_id: int
    status: Status
    created_at: datetime
    updated_at: datetime
    fields: dict[str, Any] = field(default_factory=dict)
    deleted_at: datetime | None = None


@dataclass
class User:
    id: int
    username: str
    email: str
    password_hash: str
    status: UserStatus = UserStatus.INACTIVE
    otp: str | None = None
    otp_issued_at: datetime | None = None
    created_at: datetime | None = None


class AbstractRepository(ABC):
    """Owner-scoped CRUD with soft deletion."""

    @abstractmethod
    def create(self, owner_id: int, fields: dict[str, Any], status: Status = Status.NOT_STARTED) -> Record:
        raise NotImplementedError

    @abstractmethod
    def get(self, owner_id: int, record_id: int) -> Record | None:
        """Return the record, or None if missing, deleted or owned by someone else."""
        raise NotImplementedError

    @abstractmethod
    def list(self, owner_id: int, **filters: Any) -> list[Record]:
        """Return the owner's non-deleted records matching all ``filters``."""
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        owner_id: int,
        record_id: int,
        changes: dict[str, Any],
        status: Status | None = None,
    ) -> Record | None:
        raise NotImplementedError

    @abstractmethod
    def soft_delete(self, owner_id: int, record_id: int) -> Record | None:
        """Mark a record deleted; returns None if it was not visible."""
        raise NotImplementedError


class AbstractUserStore(ABC):
    @abstractmethod
    def add(self, username: str, email: str, password_hash: str) -> User:
        """Create a user.

        Raises:
            ConflictAppError: If the email is already registered.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, user_id: int) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, user: User) -> None:
        raise NotImplementedError
