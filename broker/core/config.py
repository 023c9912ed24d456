"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front.
if _env_file and os.getenv("TESTING", "").lower() != "true":
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class BrokerSettings(BaseSettings):
    """Rate window, backoff and cache tuning for the upstream request broker."""

    max_requests: int = Field(
        100,
        description="Maximum requests admitted within one sliding window",
        ge=1,
    )
    window_seconds: float = Field(
        2.0,
        description="Length of the sliding rate window in seconds",
        gt=0,
    )
    backoff_floor_seconds: float = Field(
        1.0,
        description="Retry delay applied after the first throttled (429) response",
        gt=0,
    )
    backoff_max_seconds: float | None = Field(
        None,
        description="Optional ceiling for the retry delay (unset = unbounded doubling)",
        gt=0,
    )
    max_attempts: int | None = Field(
        None,
        description="Optional cap on attempts per request while throttled (unset = unbounded)",
        ge=1,
    )
    cache_ttl_seconds: float = Field(
        300.0,
        description="Freshness threshold for cached responses",
        gt=0,
    )
    request_timeout_seconds: float = Field(
        10.0,
        description="Timeout for a single upstream HTTP call",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="BROKER_",
        case_sensitive=False,
    )


class PlatformSettings(BaseSettings):
    """Upstream submission feeds."""

    codeforces_base_url: str = Field(
        "https://codeforces.com",
        description="Base URL of the Codeforces API host",
    )
    leetcode_base_url: str = Field(
        "https://leetcode-api-faisalshohag.vercel.app",
        description="Base URL of the LeetCode submissions proxy",
    )

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    daily_goal: int = Field(
        5,
        description="Accepted submissions per day needed to be listed as a champion",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(3, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a value is out of range.
    """

    app_env: str = APP_ENV
    broker: BrokerSettings = Field(default_factory=BrokerSettings)
    platforms: PlatformSettings = Field(default_factory=PlatformSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
