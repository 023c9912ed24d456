"""Retry delay shared by all requests of one broker."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_FLOOR_SECONDS = 1.0


class BackoffState:
    """Exponential retry delay that doubles on throttling and resets otherwise.

    The delay only ever grows, except through on_settled(). With no
    max_delay_seconds the growth is unbounded.

    Attributes:
        floor_seconds: Delay after a reset.
        max_delay_seconds: Optional ceiling applied when doubling.
    """

    def __init__(
        self,
        floor_seconds: float = DEFAULT_FLOOR_SECONDS,
        max_delay_seconds: float | None = None,
    ) -> None:
        if floor_seconds <= 0:
            raise ValueError("floor_seconds must be > 0")
        if max_delay_seconds is not None and max_delay_seconds < floor_seconds:
            raise ValueError("max_delay_seconds must be >= floor_seconds")

        self.floor_seconds = floor_seconds
        self.max_delay_seconds = max_delay_seconds
        self._delay = floor_seconds
        self._throttle_count = 0

    @property
    def throttle_count(self) -> int:
        """Consecutive throttled outcomes since the last reset."""
        return self._throttle_count

    def current_delay(self) -> float:
        return self._delay

    def on_throttled(self) -> None:
        """Double the delay after a throttled (429) response."""
        delay = self._delay * 2
        if self.max_delay_seconds is not None:
            delay = min(delay, self.max_delay_seconds)
        self._delay = delay
        self._throttle_count += 1

    def on_settled(self) -> None:
        """Reset to the floor after any success or non-retryable failure."""
        if self._throttle_count:
            logger.debug(
                "backoff.reset",
                extra={"after_throttles": self._throttle_count, "delay_s": self._delay},
            )
        self._delay = self.floor_seconds
        self._throttle_count = 0

    def stats(self) -> dict[str, float | int | None]:
        return {
            "floor_seconds": self.floor_seconds,
            "max_delay_seconds": self.max_delay_seconds,
            "current_delay_seconds": self._delay,
            "consecutive_throttles": self._throttle_count,
        }
