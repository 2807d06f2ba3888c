"""
core/rate_guard.py -- Global fixed-window request guard for the weather route.

One FixedWindowRateGuard is built in the API lifespan and shared through
app.state. It counts every request against a single global counter -- no
per-user or per-IP partition. Per-IP brute-force limits on the auth routes
are a separate concern handled by slowapi (api/limiter.py).

Windows are aligned to the wall clock: with window_seconds=60 every window
starts on a whole minute, so all processes agree on the boundaries. The
count resets the first time a request lands in a new window.

The lock makes read-compare-increment one step, so concurrent requests can
never be lost from the count or admitted past the limit.
"""

import math
import threading
import time
from typing import Callable

from core.messages import MessageKey
from core.results import Result, StatusCode


class FixedWindowRateGuard:
    def __init__(self, limit: int = 10, window_seconds: float = 60, clock: Callable[[], float] = time.time) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._window_start = self._align(clock())
        self._count = 0

    def _align(self, now: float) -> float:
        return math.floor(now / self.window_seconds) * self.window_seconds

    def try_acquire(self) -> bool:
        """Count one request. Returns False when the current window is full."""
        with self._lock:
            window_start = self._align(self._clock())
            if window_start != self._window_start:
                self._window_start = window_start
                self._count = 0
            if self._count >= self.limit:
                return False
            self._count += 1
            return True

    def check(self) -> Result[None]:
        if self.try_acquire():
            return Result.ok(None, MessageKey.REQUEST_ACCEPTED)
        return Result.fail(StatusCode.TOO_MANY_REQUESTS, MessageKey.TOO_MANY_REQUESTS)

    def retry_after(self) -> int:
        """Whole seconds until the next window boundary (at least 1)."""
        now = self._clock()
        remaining = self._align(now) + self.window_seconds - now
        return max(1, math.ceil(remaining))

    @property
    def remaining(self) -> int:
        with self._lock:
            if self._align(self._clock()) != self._window_start:
                return self.limit
            return self.limit - self._count
