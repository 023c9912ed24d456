"""Rate limiting adapters.

The broker depends on the AbstractRateWindow interface so the in-memory
sliding window can later be replaced by a shared store without touching the
request queue.
"""

from broker.adapters.rate_limit.base import AbstractRateWindow, RateWindowStats
from broker.adapters.rate_limit.sliding_window import InMemorySlidingWindowRateLimiter

__all__ = [
    "AbstractRateWindow",
    "InMemorySlidingWindowRateLimiter",
    "RateWindowStats",
]
