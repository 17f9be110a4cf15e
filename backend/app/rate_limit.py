"""
Sliding-window call budget for providers with a hard per-minute quota.
"""

from __future__ import annotations

import time
from collections import deque
from threading import Lock

from app.cache import Clock


class SlidingWindowRateLimiter:
    """
    Admit at most ``limit`` calls within any trailing ``window_seconds``.

    Timestamps outside the window are pruned lazily before each admission
    check. The check and the record happen under one lock so concurrent
    callers can never overshoot the budget.
    """

    def __init__(
        self, limit: int, window_seconds: float = 60.0, clock: Clock = time.monotonic
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._calls: deque[float] = deque()
        self._lock = Lock()

    def _prune(self, now: float) -> None:
        floor = now - self.window_seconds
        while self._calls and self._calls[0] < floor:
            self._calls.popleft()

    def try_acquire(self) -> bool:
        """
        Request permission for one call.

        Returns:
            True if the call is admitted (and recorded), False otherwise
        """
        with self._lock:
            now = self._clock()
            self._prune(now)
            if len(self._calls) >= self.limit:
                return False
            self._calls.append(now)
            return True

    def remaining(self) -> int:
        """Budget left in the current window; read-only."""
        with self._lock:
            floor = self._clock() - self.window_seconds
            in_window = sum(1 for ts in self._calls if ts >= floor)
        return max(self.limit - in_window, 0)
