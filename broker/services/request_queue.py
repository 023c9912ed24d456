"""FIFO request queue drained by a single worker task.

Only the worker touches the rate window and the transport executor, so at most
one upstream call is in flight and neither needs a lock. Adding a second
worker would require locking both.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from broker.adapters.rate_limit.base import AbstractRateWindow
from broker.services.transport import SleepFunc, TransportExecutor

logger = logging.getLogger(__name__)


@dataclass
class QueuedRequest:
    """A resource waiting to be fetched and the future its caller awaits."""

    resource: str
    future: asyncio.Future = field(repr=False)


class RequestQueue:
    """Serializes upstream calls in arrival order.

    Attributes:
        window: Rate window consulted before every call.
        executor: Transport executor performing the call.
    """

    def __init__(
        self,
        window: AbstractRateWindow,
        executor: TransportExecutor,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.window = window
        self.executor = executor
        self._sleep = sleep
        self._queue: asyncio.Queue[QueuedRequest] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._processed = 0
        self._failed = 0

    @property
    def pending(self) -> int:
        """Requests enqueued but not yet picked up by the worker."""
        return self._queue.qsize()

    @property
    def worker_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def enqueue(self, resource: str) -> asyncio.Future:
        """Append a request and return a future fulfilled with its outcome.

        Must be called from within a running event loop. Awaiting the future
        yields the decoded payload or raises the request's error. Abandoning
        the future does not withdraw the request.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._queue.put_nowait(QueuedRequest(resource=resource, future=future))
        logger.debug("queue.enqueued", extra={"url": resource, "pending": self._queue.qsize()})
        self._ensure_worker()
        return future

    async def submit(self, resource: str) -> Any:
        """Enqueue resource and wait for its outcome."""
        return await self.enqueue(resource)

    def _ensure_worker(self) -> None:
        if self.worker_running:
            return
        self._worker = asyncio.get_running_loop().create_task(
            self._run(), name="broker-request-queue"
        )

    async def _run(self) -> None:
        while True:
            request = await self._queue.get()
            try:
                await self._process(request)
            finally:
                self._queue.task_done()

    async def _process(self, request: QueuedRequest) -> None:
        while (wait := self.window.admit()) > 0:
            logger.info(
                "rate_window.wait",
                extra={"url": request.resource, "wait_s": round(wait, 3)},
            )
            await self._sleep(wait)

        try:
            result = await self.executor.execute(request.resource)
        except asyncio.CancelledError:
            if not request.future.done():
                request.future.cancel()
            raise
        except Exception as exc:
            self._failed += 1
            logger.info(
                "queue.request_failed",
                extra={"url": request.resource, "error_type": type(exc).__name__},
            )
            if not request.future.done():
                request.future.set_exception(exc)
        else:
            if not request.future.done():
                request.future.set_result(result)
        finally:
            self._processed += 1

    async def aclose(self) -> None:
        """Wait for every enqueued request to finish, then stop the worker."""
        if self.worker_running:
            await self._queue.join()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

    def stats(self) -> dict[str, int | bool]:
        return {
            "pending": self.pending,
            "processed": self._processed,
            "failed": self._failed,
            "worker_running": self.worker_running,
        }
