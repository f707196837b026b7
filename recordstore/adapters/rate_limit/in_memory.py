"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Bounded: entries from elapsed windows are purged and at most ``max_keys``
  identities are tracked (least recently used first out).
"""

from __future__ import annotations

import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from recordstore.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from recordstore.core.errors import RateLimitAppError


@dataclass
class _WindowState:
    window_start: float
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    Limits operations per key within a fixed window of time (e.g., 10
    operations per 1 second). Once a key is exhausted it stays at zero
    remaining until the window rolls over.

    Important:
        This limiter is per-process only. If the API runs with multiple
        workers, each worker will enforce its own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        max_keys: int | None = 10000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_seconds: Size of the fixed window in seconds.
            max_keys: Maximum number of tracked keys (None for unlimited).
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit, window_seconds or max_keys are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._max_keys = max_keys
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: OrderedDict[str, _WindowState] = OrderedDict()
        self._last_purged_window: float | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def _get_window_bounds(self, now: float) -> tuple[float, float]:
        """Compute fixed-window boundaries for a given timestamp.

        Args:
            now: UNIX time in seconds.

        Returns:
            Tuple of (window_start, reset_at) in epoch seconds.
        """
        window_start = math.floor(now / self._window_seconds) * self._window_seconds
        reset_at = window_start + self._window_seconds
        return window_start, reset_at

    def _purge_stale_locked(self, window_start: float) -> None:
        """Drop keys whose window already elapsed, once per window."""
        if self._last_purged_window == window_start:
            return
        stale = [k for k, state in self._state_by_key.items() if state.window_start < window_start]
        for key in stale:
            del self._state_by_key[key]
        self._last_purged_window = window_start

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_keys is None:
            return
        while len(self._state_by_key) > self._max_keys:
            self._state_by_key.popitem(last=False)

    def _get_or_reset_state(self, key: str, window_start: float) -> _WindowState:
        """Get the current state for key or reset it when window changes."""
        state = self._state_by_key.get(key)
        if state is None or state.window_start != window_start:
            state = _WindowState(window_start=window_start, count=0)
            self._state_by_key[key] = state
        self._state_by_key.move_to_end(key)
        return state

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for the provided key.

        This method both checks the current window usage and mutates the state
        if the operation is allowed.

        Args:
            key: Unique identifier for rate limiting (e.g., client IP).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult with the remaining budget.

        Raises:
            ValueError: If key is empty or cost is invalid.
            RateLimitAppError: If the budget for this window is exhausted.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        window_start, reset_at = self._get_window_bounds(now)

        with self._lock:
            self._purge_stale_locked(window_start)
            state = self._get_or_reset_state(key, window_start)
            self._evict_if_over_capacity_locked()

            if state.count + cost <= self._limit:
                state.count += cost
                return RateLimitResult(
                    limit=self._limit,
                    remaining=max(0, self._limit - state.count),
                    reset_at=int(math.ceil(reset_at)),
                )

            remaining = max(0, self._limit - state.count)

        retry_after = max(1, int(math.ceil(reset_at - now)))
        raise RateLimitAppError(
            code="rate_limit_exceeded",
            message="Too many requests, slow down",
            details={
                "limit": self._limit,
                "remaining": remaining,
                "reset_at": int(math.ceil(reset_at)),
                "retry_after": retry_after,
            },
        )
