"""Tests for the Codeforces and LeetCode feed helpers."""

import pytest

from broker.core.config import BrokerSettings, PlatformSettings
from broker.core.errors import PayloadAppError, ValidationAppError
from broker.services.broker import FetchOutcome, RequestBroker
from broker.services.platforms import (
    Platform,
    build_cache_key,
    build_resource_url,
    fetch_codeforces_submissions,
    fetch_leetcode_submissions,
    fetch_platform_submissions,
    validate_codeforces_payload,
    validate_leetcode_payload,
)


@pytest.fixture
def make_broker(recording_sleep):
    def _make(client) -> RequestBroker:
        return RequestBroker.from_settings(BrokerSettings(), client, sleep=recording_sleep)

    return _make


def test_cache_key_format() -> None:
    assert build_cache_key(Platform.CODEFORCES, "tourist") == "codeforces-tourist"
    assert build_cache_key(Platform.LEETCODE, "alice") == "leetcode-alice"


def test_resource_urls_encode_handle() -> None:
    cfg = PlatformSettings(
        codeforces_base_url="https://cf.test/",
        leetcode_base_url="https://lc.test",
    )

    assert (
        build_resource_url(Platform.CODEFORCES, "a b&c", cfg)
        == "https://cf.test/api/user.status?handle=a%20b%26c"
    )
    assert build_resource_url(Platform.LEETCODE, "x/y", cfg) == "https://lc.test/x%2Fy"


def test_codeforces_failed_status_rejected() -> None:
    with pytest.raises(PayloadAppError, match="handle: User not found"):
        validate_codeforces_payload({"status": "FAILED", "comment": "handle: User not found"})

    with pytest.raises(PayloadAppError, match="Codeforces API request failed"):
        validate_codeforces_payload({"status": "FAILED"})

    validate_codeforces_payload({"status": "OK", "result": []})


@pytest.mark.parametrize("payload", [None, [], {}, {"recentSubmissions": "nope"}])
def test_leetcode_shape_rejected(payload) -> None:
    with pytest.raises(PayloadAppError):
        validate_leetcode_payload(payload)


@pytest.mark.asyncio
@pytest.mark.parametrize("handle", ["", "   "])
async def test_blank_handle_raises_before_network(make_broker, scripted_client, handle: str) -> None:
    client = scripted_client({"status": "OK", "result": []})
    broker = make_broker(client)

    with pytest.raises(ValidationAppError):
        await fetch_platform_submissions(broker, Platform.CODEFORCES, handle)

    assert client.calls == []
    await broker.aclose()


@pytest.mark.asyncio
async def test_codeforces_failed_envelope_falls_back_to_empty(make_broker, scripted_client) -> None:
    client = scripted_client({"status": "FAILED", "comment": "handle: User not found"})
    broker = make_broker(client)

    payload = await fetch_codeforces_submissions(broker, "ghost")

    assert payload == {"result": []}
    await broker.aclose()


@pytest.mark.asyncio
async def test_leetcode_success_is_cached_under_platform_key(make_broker, scripted_client) -> None:
    feed = {"recentSubmissions": [{"statusDisplay": "Accepted", "timestamp": "1700000000"}]}
    client = scripted_client(feed)
    broker = make_broker(client)

    payload = await fetch_leetcode_submissions(broker, " alice ")
    again = await fetch_platform_submissions(broker, Platform.LEETCODE, "alice")

    assert payload == feed
    assert again.outcome is FetchOutcome.CACHED
    assert broker.cache.get("leetcode-alice") == feed
    assert len(client.calls) == 1
    assert client.calls[0].endswith("/alice")
    await broker.aclose()


@pytest.mark.asyncio
async def test_leetcode_upstream_error_gives_empty_default(make_broker, scripted_client) -> None:
    broker = make_broker(scripted_client(502))

    result = await fetch_platform_submissions(broker, Platform.LEETCODE, "alice")

    assert result.value == {"recentSubmissions": []}
    assert result.outcome is FetchOutcome.DEFAULT
    await broker.aclose()
