"""Public entry point of the request broker.

A fetch never fails because of the upstream: it returns, in order of
preference, a fresh cached value, a newly fetched value, the last cached value
however old, or the caller's default. The outcome is reported through a log
line and an optional hook so callers and tests can tell the four apart.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable

from broker.adapters.http.base import AbstractHTTPClient
from broker.adapters.rate_limit.sliding_window import InMemorySlidingWindowRateLimiter
from broker.core.config import BrokerSettings
from broker.core.errors import AppError
from broker.services.backoff import BackoffState
from broker.services.request_queue import RequestQueue
from broker.services.transport import SleepFunc, TransportExecutor
from broker.utils.response_cache import ResponseCache

logger = logging.getLogger(__name__)

_MISS = object()


class FetchOutcome(str, Enum):
    """Where the value returned by a fetch came from."""

    FRESH = "fresh"
    CACHED = "cached"
    STALE = "stale"
    DEFAULT = "default"


@dataclass(frozen=True)
class FetchResult:
    value: Any
    outcome: FetchOutcome


PayloadValidator = Callable[[Any], None]
OutcomeHook = Callable[[str, FetchResult], None]


class RequestBroker:
    """Cache-first, rate-limited, best-effort fetcher for one upstream budget.

    Owns its cache, rate window, backoff state and request queue; create one
    instance per upstream budget and share it between callers.

    Attributes:
        cache: Response cache keyed by caller-chosen strings.
        queue: Request queue driving the rate window and transport executor.
    """

    def __init__(
        self,
        *,
        cache: ResponseCache,
        queue: RequestQueue,
        on_outcome: OutcomeHook | None = None,
    ) -> None:
        self.cache = cache
        self.queue = queue
        self.on_outcome = on_outcome

    @classmethod
    def from_settings(
        cls,
        broker_settings: BrokerSettings,
        http_client: AbstractHTTPClient,
        *,
        on_outcome: OutcomeHook | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> "RequestBroker":
        """Wire a broker from configuration.

        Args:
            broker_settings: Window, backoff and cache settings.
            http_client: Upstream transport adapter.
            on_outcome: Optional hook called with (key, FetchResult) per fetch.
            sleep: Coroutine used for rate-window and backoff waits.

        Returns:
            RequestBroker: Broker owning freshly created components.
        """
        backoff = BackoffState(
            floor_seconds=broker_settings.backoff_floor_seconds,
            max_delay_seconds=broker_settings.backoff_max_seconds,
        )
        executor = TransportExecutor(
            http_client,
            backoff,
            max_attempts=broker_settings.max_attempts,
            sleep=sleep,
        )
        window = InMemorySlidingWindowRateLimiter(
            max_requests=broker_settings.max_requests,
            window_seconds=broker_settings.window_seconds,
        )
        return cls(
            cache=ResponseCache(ttl_seconds=broker_settings.cache_ttl_seconds),
            queue=RequestQueue(window, executor, sleep=sleep),
            on_outcome=on_outcome,
        )

    async def fetch(
        self,
        key: str,
        resource: str,
        *,
        default: Any = None,
        validate: PayloadValidator | None = None,
    ) -> Any:
        """Return the best available value for key.

        Args:
            key: Cache key identifying the logical entity.
            resource: Upstream URL fetched on a cache miss.
            default: Value returned when the fetch fails and nothing is cached.
            validate: Optional check run on a fetched payload before caching;
                raising rejects the payload as a failed fetch.

        Returns:
            The fetched, cached, stale, or default value. Never raises for
            upstream failures.
        """
        result = await self.fetch_result(key, resource, default=default, validate=validate)
        return result.value

    async def fetch_result(
        self,
        key: str,
        resource: str,
        *,
        default: Any = None,
        validate: PayloadValidator | None = None,
    ) -> FetchResult:
        """Like fetch(), but also report where the value came from."""
        cached = self.cache.get(key, _MISS)
        if cached is not _MISS:
            return self._report(key, FetchResult(cached, FetchOutcome.CACHED))

        try:
            payload = await self.queue.enqueue(resource)
            if validate is not None:
                validate(payload)
        except Exception as exc:
            return self._fallback(key, default, exc)

        self.cache.put(key, payload)
        return self._report(key, FetchResult(payload, FetchOutcome.FRESH))

    def _fallback(self, key: str, default: Any, exc: Exception) -> FetchResult:
        stale = self.cache.peek_stale(key, _MISS)
        outcome = FetchOutcome.STALE if stale is not _MISS else FetchOutcome.DEFAULT
        logger.warning(
            "broker.fetch_failed",
            extra={
                "cache_key": key,
                "error_code": exc.code if isinstance(exc, AppError) else type(exc).__name__,
                "error_msg": str(exc),
                "fallback": outcome.value,
            },
        )
        value = stale if stale is not _MISS else default
        return self._report(key, FetchResult(value, outcome))

    def _report(self, key: str, result: FetchResult) -> FetchResult:
        logger.info("broker.fetch", extra={"cache_key": key, "outcome": result.outcome.value})
        if self.on_outcome is not None:
            self.on_outcome(key, result)
        return result

    def stats(self) -> dict[str, Any]:
        return {
            "cache": self.cache.stats(),
            "rate_window": asdict(self.queue.window.stats()),
            "backoff": self.queue.executor.backoff.stats(),
            "transport": self.queue.executor.stats(),
            "queue": self.queue.stats(),
        }

    async def aclose(self) -> None:
        """Drain the queue and release the upstream transport."""
        await self.queue.aclose()
        await self.queue.executor.client.aclose()
