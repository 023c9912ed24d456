"""Route tests for the submissions API using a scripted upstream."""

from __future__ import annotations

import time
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from broker.core.app_factory import create_app
from broker.core.config import settings


@pytest.fixture
def upstream(scripted_client):
    """Scripted upstream returning one accepted Codeforces and LeetCode submission now."""
    now = int(time.time())
    client = scripted_client(
        {"status": "OK", "result": [{"verdict": "OK", "creationTimeSeconds": now}]},
        {"recentSubmissions": [{"statusDisplay": "Accepted", "timestamp": str(now)}]},
    )
    return client


@pytest.fixture
def client(upstream) -> Iterator[TestClient]:
    app = create_app(http_client_factory=lambda: upstream)
    with TestClient(app) as test_client:
        yield test_client


def test_codeforces_summary(client: TestClient, upstream) -> None:
    resp = client.get("/v1/submissions/codeforces/tourist")

    assert resp.status_code == 200
    body = resp.json()
    assert body == {
        "platform": "codeforces",
        "handle": "tourist",
        "outcome": "fresh",
        "total_submissions": 1,
        "accepted_today": 1,
    }
    assert upstream.calls[0].endswith("/api/user.status?handle=tourist")


def test_repeated_summary_is_served_from_cache(client: TestClient, upstream) -> None:
    client.get("/v1/submissions/codeforces/tourist")
    resp = client.get("/v1/submissions/codeforces/tourist")

    assert resp.json()["outcome"] == "cached"
    assert len(upstream.calls) == 1


def test_unknown_platform_is_rejected(client: TestClient) -> None:
    resp = client.get("/v1/submissions/atcoder/tourist")

    assert resp.status_code == 422


def test_blank_handle_returns_400(client: TestClient) -> None:
    resp = client.get("/v1/submissions/codeforces/%20")

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "handle_required"


def test_upstream_failure_degrades_to_empty_summary(scripted_client) -> None:
    failing = scripted_client(503)
    app = create_app(http_client_factory=lambda: failing)

    with TestClient(app) as test_client:
        resp = test_client.get("/v1/submissions/leetcode/alice")

    assert resp.status_code == 200
    assert resp.json()["outcome"] == "default"
    assert resp.json()["total_submissions"] == 0
    assert failing.closed is True


def test_daily_stats_marks_champions(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.app, "daily_goal", 2)

    resp = client.post(
        "/v1/daily-stats",
        json={
            "friends": [
                {"name": "Ana", "codeforces": "ana_cf", "leetcode": "ana_lc"},
                {"name": "Bo", "codeforces": None, "leetcode": None},
            ]
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["daily_goal"] == 2
    assert body["friends"][0] == {
        "name": "Ana",
        "codeforces_today": 1,
        "leetcode_today": 1,
        "total_today": 2,
        "is_champion": True,
    }
    assert body["friends"][1]["total_today"] == 0
    assert body["friends"][1]["is_champion"] is False
    assert body["champions"] == ["Ana"]


def test_broker_stats(client: TestClient) -> None:
    client.get("/v1/submissions/codeforces/tourist")

    resp = client.get("/v1/broker/stats")

    assert resp.status_code == 200
    stats = resp.json()
    assert stats["queue"]["processed"] == 1
    assert stats["cache"]["entries"] == 1
    assert stats["rate_window"]["max_requests"] == settings.broker.max_requests
    assert stats["backoff"]["current_delay_seconds"] == settings.broker.backoff_floor_seconds
