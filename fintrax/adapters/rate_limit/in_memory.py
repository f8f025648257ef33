"""In-memory fixed-window rate limit gate.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: keys are spread over independently locked shards, so callers
  with different keys rarely contend.
- The window opens on a key's first request and closes ``window_seconds``
  later; it is not aligned to wall-clock boundaries.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from fintrax.adapters.rate_limit.base import AbstractRateLimiter, ClientWindow
from fintrax.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class _Shard:
    __slots__ = ("lock", "windows")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.windows: dict[str, ClientWindow] = {}


class InMemoryRateLimitGate(AbstractRateLimiter):
    """Rate limit gate using a fixed counting window per key.

    The ``limit + 1``-th request inside a window is the first one rejected.
    Once more than ``window_seconds`` have elapsed since the window opened,
    the next request resets the window and is admitted. Rejected requests do
    not extend or mutate the window.

    A daemon thread started with :meth:`start` periodically calls
    :meth:`sweep` to forget keys that stopped sending requests. Admission
    never depends on the sweep having run.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        sweep_interval_seconds: float = 60.0,
        shards: int = 16,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the gate.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Length of the counting window in seconds.
            sweep_interval_seconds: Delay between background sweeps.
            shards: Number of independently locked partitions.
            name: Policy name used in logs.
            clock: Monotonic time source returning seconds.

        Raises:
            ConfigurationError: If any numeric argument is not positive.
        """
        _require_positive("limit", limit, name)
        _require_positive("window_seconds", window_seconds, name)
        _require_positive("sweep_interval_seconds", sweep_interval_seconds, name)
        _require_positive("shards", shards, name)

        self.name = name
        self._limit = int(limit)
        self._window = float(window_seconds)
        self._sweep_interval = float(sweep_interval_seconds)
        self._clock = clock
        self._shards = tuple(_Shard() for _ in range(int(shards)))

        self._sweeper: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lifecycle_lock = threading.Lock()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryRateLimitGate(name={self.name!r}, limit={self._limit}, "
            f"window_seconds={self._window}, shards={len(self._shards)})"
        )

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def _is_expired(self, window: ClientWindow, now: float) -> bool:
        return now - window.window_start > self._window

    def admit(self, key: str) -> bool:
        """Decide whether the request identified by ``key`` may proceed.

        The check and the counter update happen under the key's shard lock,
        so concurrent callers sharing a key can never be admitted past the
        limit.

        Args:
            key: Caller identity (e.g., client IP address).

        Returns:
            True when admitted, False when the key has used up its window.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        shard = self._shard_for(key)
        with shard.lock:
            now = self._clock()
            window = shard.windows.get(key)

            if window is None or self._is_expired(window, now):
                shard.windows[key] = ClientWindow(count=1, window_start=now)
                return True

            if window.count >= self._limit:
                return False

            window.count += 1
            return True

    def sweep(self) -> int:
        """Drop every entry whose window has already expired.

        Shards are swept one at a time so admission on other shards keeps
        flowing while a sweep is in progress.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for shard in self._shards:
            with shard.lock:
                now = self._clock()
                expired = [k for k, w in shard.windows.items() if self._is_expired(w, now)]
                for key in expired:
                    del shard.windows[key]
                removed += len(expired)

        if removed:
            logger.debug(
                "rate_limit.swept",
                extra={"policy": self.name, "removed": removed, "tracked": self.size()},
            )
        return removed

    def size(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.windows)
        return total

    def clear(self) -> None:
        """Forget all tracked keys."""
        for shard in self._shards:
            with shard.lock:
                shard.windows.clear()

    def start(self) -> None:
        """Start the background sweeper thread (idempotent)."""
        with self._lifecycle_lock:
            if self._sweeper is not None and self._sweeper.is_alive():
                return
            self._stop_event.clear()
            self._sweeper = threading.Thread(
                target=self._run_sweeper,
                name=f"rate-limit-sweeper-{self.name}",
                daemon=True,
            )
            self._sweeper.start()

        logger.info(
            "rate_limit.sweeper_started",
            extra={
                "policy": self.name,
                "limit": self._limit,
                "window_s": self._window,
                "interval_s": self._sweep_interval,
            },
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the background sweeper and wait for it to exit (idempotent)."""
        with self._lifecycle_lock:
            sweeper = self._sweeper
            self._sweeper = None
            self._stop_event.set()

        if sweeper is not None:
            sweeper.join(timeout)
            logger.info("rate_limit.sweeper_stopped", extra={"policy": self.name})

    @property
    def running(self) -> bool:
        sweeper = self._sweeper
        return sweeper is not None and sweeper.is_alive()

    def _run_sweeper(self) -> None:
        while not self._stop_event.wait(self._sweep_interval):
            try:
                self.sweep()
            except Exception:
                # Admission re-checks expiry itself; a failed sweep only delays reclamation.
                logger.exception("rate_limit.sweep_failed", extra={"policy": self.name})


def _require_positive(field: str, value: float, policy: str) -> None:
    if value is None or value <= 0:
        raise ConfigurationError(
            code="invalid_rate_limit_config",
            message=f"{field} must be > 0 (got {value!r})",
            details={"field": field, "policy": policy},
        )
