"""Executes upstream calls and classifies their outcome.

Outcomes:
- 2xx: body decoded as JSON and returned; backoff reset.
- 429: retried by tenacity, sleeping the shared backoff delay before each retry.
- any other status, transport exception, or undecodable body:
  backoff reset and TransportAppError raised.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, NoReturn

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    stop_never,
)

from broker.adapters.http.base import AbstractHTTPClient, HTTPResponse
from broker.core.errors import TransportAppError
from broker.services.backoff import BackoffState

logger = logging.getLogger(__name__)

THROTTLED_STATUS = 429

SleepFunc = Callable[[float], Awaitable[None]]


def _is_throttled(response: HTTPResponse) -> bool:
    return response.status_code == THROTTLED_STATUS


class TransportExecutor:
    """Runs a single logical request, retrying while the upstream throttles.

    The retry delay comes from the shared BackoffState rather than from a
    tenacity wait strategy, so consecutive throttles keep doubling across
    requests until something settles the backoff.

    Attributes:
        client: HTTP transport adapter.
        backoff: Retry delay state shared across requests.
        max_attempts: Optional ceiling on attempts per request (None = unbounded).
        last_attempts: Attempts used by the most recent execute() call.
    """

    def __init__(
        self,
        client: AbstractHTTPClient,
        backoff: BackoffState,
        *,
        max_attempts: int | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self.client = client
        self.backoff = backoff
        self.max_attempts = max_attempts
        self.last_attempts = 0
        self._sleep = sleep
        self._total_attempts = 0
        self._throttled_responses = 0

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_result(_is_throttled),
            wait=self._throttle_delay,
            stop=stop_after_attempt(self.max_attempts) if self.max_attempts else stop_never,
            sleep=self._sleep,
            before_sleep=self._on_throttled,
            retry_error_callback=self._raise_throttle_ceiling,
        )

    async def execute(self, resource: str) -> Any:
        """Fetch resource and return its decoded JSON payload.

        Args:
            resource: Absolute URL of the upstream resource.

        Returns:
            Decoded JSON body of the first non-throttled 2xx response.

        Raises:
            TransportAppError: On a non-2xx, non-429 status, a transport
                failure, a malformed body, or when max_attempts is exhausted.
        """
        self.last_attempts = 0
        response: HTTPResponse = await self._retrying()(self._attempt, resource)

        self.backoff.on_settled()
        if not response.is_success:
            logger.warning(
                "transport.http_error",
                extra={"url": resource, "status": response.status_code, "attempt": self.last_attempts},
            )
            raise TransportAppError(
                code="upstream_http_error",
                message=f"HTTP error! status: {response.status_code}",
                details={
                    "url": resource,
                    "attempts": self.last_attempts,
                    "http_status": response.status_code,
                },
            )

        try:
            return json.loads(response.body)
        except ValueError as exc:
            logger.warning(
                "transport.malformed_body",
                extra={"url": resource, "size": len(response.body)},
            )
            raise TransportAppError(
                code="upstream_malformed_body",
                message="Upstream returned a body that is not valid JSON",
                details={
                    "url": resource,
                    "attempts": self.last_attempts,
                    "http_status": response.status_code,
                    "cause": str(exc),
                },
            ) from exc

    async def _attempt(self, resource: str) -> HTTPResponse:
        self.last_attempts += 1
        self._total_attempts += 1

        try:
            response = await self.client.get(resource)
        except Exception as exc:
            self.backoff.on_settled()
            logger.warning(
                "transport.failed",
                extra={
                    "url": resource,
                    "attempt": self.last_attempts,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise TransportAppError(
                code="upstream_unreachable",
                message=f"Request to upstream failed: {exc}",
                details={"url": resource, "attempts": self.last_attempts, "cause": str(exc)},
            ) from exc

        if _is_throttled(response):
            self._throttled_responses += 1
        return response

    def _throttle_delay(self, retry_state: RetryCallState) -> float:
        return self.backoff.current_delay()

    def _on_throttled(self, retry_state: RetryCallState) -> None:
        # Runs only when a retry will actually sleep; the sleep already holds
        # the pre-doubling delay.
        delay = retry_state.next_action.sleep if retry_state.next_action else None
        self.backoff.on_throttled()
        logger.warning(
            "transport.throttled",
            extra={
                "url": retry_state.args[0] if retry_state.args else None,
                "attempt": retry_state.attempt_number,
                "delay_s": delay,
            },
        )

    def _raise_throttle_ceiling(self, retry_state: RetryCallState) -> NoReturn:
        resource = retry_state.args[0] if retry_state.args else None
        logger.error(
            "transport.throttle_ceiling",
            extra={"url": resource, "attempts": retry_state.attempt_number},
        )
        raise TransportAppError(
            code="upstream_throttled",
            message=f"Upstream still throttling after {retry_state.attempt_number} attempts",
            details={
                "url": resource,
                "attempts": retry_state.attempt_number,
                "http_status": THROTTLED_STATUS,
            },
        )

    def stats(self) -> dict[str, int | None]:
        return {
            "total_attempts": self._total_attempts,
            "throttled_responses": self._throttled_responses,
            "last_attempts": self.last_attempts,
            "max_attempts": self.max_attempts,
        }
