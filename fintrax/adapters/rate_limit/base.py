"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap storage backends later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class ClientWindow:
    """Counting window tracked for a single caller key.

    Attributes:
        count: Requests admitted since ``window_start``.
        window_start: Clock reading at which the current window opened.
    """

    count: int
    window_start: float


class AbstractRateLimiter(ABC):
    """Interface for admit-or-reject gates."""

    @abstractmethod
    def admit(self, key: str) -> bool:
        """Record a request for ``key`` and decide whether it may proceed.

        Args:
            key: Caller identity (e.g., client IP address).

        Returns:
            True when the request is admitted, False when it is rejected.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self) -> int:
        """Remove entries whose window has expired.

        Returns:
            Number of entries reclaimed.
        """
        raise NotImplementedError

    @abstractmethod
    def size(self) -> int:
        """Return the number of tracked keys."""
        raise NotImplementedError

    def start(self) -> None:
        """Start background maintenance, if the backend needs any."""

    def stop(self) -> None:
        """Stop background maintenance, if the backend runs any."""
