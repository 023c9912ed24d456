"""In-memory sliding-window rate limiter for outgoing requests.

Notes:
- Per-instance only: two brokers pointed at the same host each get the full
  budget.
- Not locked: the request queue calls admit() from its single worker task.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable

from broker.adapters.rate_limit.base import AbstractRateWindow, RateWindowStats


class InMemorySlidingWindowRateLimiter(AbstractRateWindow):
    """Rate limiter that counts admissions over the trailing window.

    Unlike a fixed window, timestamps are pruned on every call, so a burst at
    the end of one interval still counts against the start of the next.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the sliding window.

        Args:
            max_requests: Maximum admissions within any trailing window.
            window_seconds: Window length in seconds.
            clock: Monotonic time source returning seconds.

        Raises:
            ValueError: If max_requests or window_seconds are invalid.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._timestamps: deque[float] = deque()
        self._admitted = 0
        self._deferred = 0

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self._window_seconds:
            self._timestamps.popleft()

    def admit(self) -> float:
        now = self._clock()
        self._prune(now)

        if len(self._timestamps) < self._max_requests:
            self._timestamps.append(now)
            self._admitted += 1
            return 0.0

        self._deferred += 1
        oldest = self._timestamps[0]
        return max(0.0, self._window_seconds - (now - oldest))

    def stats(self) -> RateWindowStats:
        self._prune(self._clock())
        return RateWindowStats(
            max_requests=self._max_requests,
            window_seconds=self._window_seconds,
            in_window=len(self._timestamps),
            admitted=self._admitted,
            deferred=self._deferred,
        )
