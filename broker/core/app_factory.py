"""Application factory for the FastAPI app.

Centralizes app construction (lifespan, middleware, handlers, routers) so
tests can build isolated apps with their own HTTP transport.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI

from broker.adapters.http.base import AbstractHTTPClient
from broker.adapters.http.httpx_client import HttpxClient
from broker.api.routes import health_router, submissions_router
from broker.core.config import settings
from broker.core.exception_handlers import setup_exception_handlers
from broker.core.logging import configure_logging
from broker.core.middleware import request_id_middleware
from broker.services.broker import RequestBroker

logger = logging.getLogger(__name__)

HTTPClientFactory = Callable[[], AbstractHTTPClient]


def _default_http_client() -> AbstractHTTPClient:
    return HttpxClient(timeout_seconds=settings.broker.request_timeout_seconds)


def create_app(http_client_factory: HTTPClientFactory | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        http_client_factory: Builds the upstream transport at startup;
            defaults to an httpx client using the configured timeout.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    configure_logging(settings.log)
    make_client = http_client_factory or _default_http_client

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.broker = RequestBroker.from_settings(settings.broker, make_client())
        logger.info(
            "broker.started",
            extra={
                "max_requests": settings.broker.max_requests,
                "window_s": settings.broker.window_seconds,
                "cache_ttl_s": settings.broker.cache_ttl_seconds,
            },
        )
        try:
            yield
        finally:
            await app.state.broker.aclose()
            logger.info("broker.stopped")

    app = FastAPI(
        title="Submission Broker API",
        description=(
            "Rate-limited, cached access to Codeforces and LeetCode submission "
            "feeds. Upstream failures degrade to stale or empty data instead of "
            "errors; each response reports which one was served."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(submissions_router, prefix="/v1")
    app.include_router(health_router)

    return app
