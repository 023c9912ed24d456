"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING so settings never load a local .env file, and provides
deterministic clocks, recorded sleeps and a scripted HTTP client so broker
tests never touch the network or wait in real time.
"""

import json
import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any  # noqa: E402

import pytest  # noqa: E402

from broker.adapters.http.base import AbstractHTTPClient, HTTPResponse  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingSleep:
    """Async sleep replacement that records delays and advances a FakeClock."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


class ScriptedHTTPClient(AbstractHTTPClient):
    """HTTP client replaying a list of responses.

    Each script item is an HTTPResponse, an int status (empty JSON body), a
    JSON-serialisable payload (200), or an Exception to raise. The last item
    repeats once the script is exhausted.
    """

    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.calls: list[str] = []
        self.closed = False

    async def get(self, url: str) -> HTTPResponse:
        self.calls.append(url)
        index = min(len(self.calls) - 1, len(self.script) - 1)
        item = self.script[index]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, HTTPResponse):
            return item
        if isinstance(item, int):
            return HTTPResponse(status_code=item, body=b"{}")
        return HTTPResponse(status_code=200, body=json.dumps(item).encode())

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep(fake_clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(fake_clock)


@pytest.fixture
def scripted_client():
    """Factory fixture: scripted_client(200, {"ok": True}, ...)."""
    return ScriptedHTTPClient
