"""Shared status enumerations.

Every domain record carries a ``status``; ``Status.DELETED`` marks a record as
logically absent. Deleted records stay stored but are invisible to reads.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Annotated

from pydantic import AfterValidator


class Status(IntEnum):
    NOT_STARTED = 1
    IN_PROGRESS = 2
    ON_HOLD = 3
    CANCELLED = 4
    DELETED = 5
    COMPLETED = 6


class UserStatus(IntEnum):
    INACTIVE = 0
    ACTIVE = 1


# Values a client may set explicitly; DELETED is reachable only through DELETE.
WRITABLE_STATUSES = frozenset(s for s in Status if s is not Status.DELETED)


def _writable_status(value: int) -> int:
    if value not in WRITABLE_STATUSES:
        raise ValueError("status must be one of 1-4 or 6; use DELETE to remove a record")
    return value


WritableStatus = Annotated[int, AfterValidator(_writable_status)]
