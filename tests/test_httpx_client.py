"""Tests for the httpx transport adapter using httpx.MockTransport."""

import json

import httpx
import pytest

from broker.adapters.http.httpx_client import HttpxClient


@pytest.mark.asyncio
async def test_returns_status_and_body_for_any_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/busy":
            return httpx.Response(429, content=b"slow down")
        return httpx.Response(200, json={"status": "OK"})

    client = HttpxClient(transport=httpx.MockTransport(handler))

    ok = await client.get("https://upstream.test/api")
    busy = await client.get("https://upstream.test/busy")

    assert ok.status_code == 200
    assert ok.is_success is True
    assert json.loads(ok.body) == {"status": "OK"}
    assert busy.status_code == 429
    assert busy.is_success is False
    assert busy.body == b"slow down"
    await client.aclose()


@pytest.mark.asyncio
async def test_sends_json_accept_header() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["accept"])
        return httpx.Response(200, json={})

    client = HttpxClient(transport=httpx.MockTransport(handler))
    await client.get("https://upstream.test/")

    assert seen == ["application/json"]
    await client.aclose()


@pytest.mark.asyncio
async def test_transport_error_becomes_runtime_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = HttpxClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RuntimeError, match="ConnectError") as exc_info:
        await client.get("https://upstream.test/")

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [httpx.InvalidURL("bad host"), httpx.StreamClosed()],
)
async def test_non_http_errors_also_become_runtime_error(error: Exception) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error

    client = HttpxClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RuntimeError, match=type(error).__name__) as exc_info:
        await client.get("https://upstream.test/")

    assert exc_info.value.__cause__ is error
    await client.aclose()
