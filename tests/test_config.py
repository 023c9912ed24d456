"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from broker.core.config import AppSettings, BrokerSettings, PlatformSettings


def test_broker_defaults() -> None:
    cfg = BrokerSettings()

    assert cfg.max_requests == 100
    assert cfg.window_seconds == 2.0
    assert cfg.backoff_floor_seconds == 1.0
    assert cfg.backoff_max_seconds is None
    assert cfg.max_attempts is None
    assert cfg.cache_ttl_seconds == 300.0


def test_broker_settings_read_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BROKER_MAX_REQUESTS", "5")
    monkeypatch.setenv("BROKER_WINDOW_SECONDS", "0.5")
    monkeypatch.setenv("BROKER_MAX_ATTEMPTS", "4")

    cfg = BrokerSettings()

    assert cfg.max_requests == 5
    assert cfg.window_seconds == 0.5
    assert cfg.max_attempts == 4


@pytest.mark.parametrize(
    "env",
    [
        {"BROKER_MAX_REQUESTS": "0"},
        {"BROKER_WINDOW_SECONDS": "0"},
        {"BROKER_CACHE_TTL_SECONDS": "-1"},
    ],
)
def test_out_of_range_values_fail_fast(monkeypatch: pytest.MonkeyPatch, env: dict[str, str]) -> None:
    for key, value in env.items():
        monkeypatch.setenv(key, value)

    with pytest.raises(ValidationError):
        BrokerSettings()


def test_platform_and_app_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLATFORM_CODEFORCES_BASE_URL", "https://cf.local")
    monkeypatch.setenv("APP_DAILY_GOAL", "3")

    assert PlatformSettings().codeforces_base_url == "https://cf.local"
    assert AppSettings().daily_goal == 3
