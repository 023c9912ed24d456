"""Submission feeds of the supported coding platforms.

Each platform maps a user handle to an upstream URL, a cache key, a payload
check and an empty default, and is fetched through the shared broker.
"""

from __future__ import annotations

from enum import Enum
from typing import Any
from urllib.parse import quote

from broker.core.config import PlatformSettings, settings
from broker.core.errors import PayloadAppError, ValidationAppError
from broker.services.broker import FetchResult, RequestBroker


class Platform(str, Enum):
    CODEFORCES = "codeforces"
    LEETCODE = "leetcode"


def build_cache_key(platform: Platform, handle: str) -> str:
    """Cache key for one user's feed on one platform, e.g. "codeforces-tourist"."""
    return f"{platform.value}-{handle}"


def build_resource_url(
    platform: Platform,
    handle: str,
    platform_settings: PlatformSettings | None = None,
) -> str:
    """Build the upstream URL for a user's submissions, percent-encoding the handle."""
    cfg = platform_settings or settings.platforms
    encoded = quote(handle, safe="")
    if platform is Platform.CODEFORCES:
        return f"{cfg.codeforces_base_url.rstrip('/')}/api/user.status?handle={encoded}"
    return f"{cfg.leetcode_base_url.rstrip('/')}/{encoded}"


def empty_payload(platform: Platform) -> dict[str, list[Any]]:
    if platform is Platform.CODEFORCES:
        return {"result": []}
    return {"recentSubmissions": []}


def validate_codeforces_payload(payload: Any) -> None:
    """Reject Codeforces envelopes reporting a failed call.

    Raises:
        PayloadAppError: If status is FAILED or the payload is not an object.
    """
    if not isinstance(payload, dict):
        raise PayloadAppError(
            code="codeforces_invalid_payload",
            message="Codeforces API returned a non-object payload",
            details={"platform": Platform.CODEFORCES.value},
        )
    if payload.get("status") == "FAILED":
        raise PayloadAppError(
            code="codeforces_failed",
            message=payload.get("comment") or "Codeforces API request failed",
            details={"platform": Platform.CODEFORCES.value},
        )


def validate_leetcode_payload(payload: Any) -> None:
    """Require a recentSubmissions list in LeetCode payloads.

    Raises:
        PayloadAppError: If the payload does not have the expected shape.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("recentSubmissions"), list):
        raise PayloadAppError(
            code="leetcode_invalid_payload",
            message="Invalid LeetCode API response format",
            details={"platform": Platform.LEETCODE.value},
        )


_VALIDATORS = {
    Platform.CODEFORCES: validate_codeforces_payload,
    Platform.LEETCODE: validate_leetcode_payload,
}


async def fetch_platform_submissions(
    broker: RequestBroker,
    platform: Platform,
    handle: str,
    *,
    platform_settings: PlatformSettings | None = None,
) -> FetchResult:
    """Fetch a user's submissions feed through the broker.

    Args:
        broker: Shared request broker.
        platform: Platform to query.
        handle: User handle on that platform.
        platform_settings: Optional override of the configured base URLs.

    Returns:
        FetchResult: Payload (fresh, cached, stale, or empty default) and its outcome.

    Raises:
        ValidationAppError: If handle is blank. Upstream failures never raise.
    """
    handle = (handle or "").strip()
    if not handle:
        raise ValidationAppError(
            code="handle_required",
            message=f"{platform.value.capitalize()} handle is required",
            details={"platform": platform.value},
        )

    return await broker.fetch_result(
        build_cache_key(platform, handle),
        build_resource_url(platform, handle, platform_settings),
        default=empty_payload(platform),
        validate=_VALIDATORS[platform],
    )


async def fetch_codeforces_submissions(broker: RequestBroker, handle: str) -> Any:
    result = await fetch_platform_submissions(broker, Platform.CODEFORCES, handle)
    return result.value


async def fetch_leetcode_submissions(broker: RequestBroker, handle: str) -> Any:
    result = await fetch_platform_submissions(broker, Platform.LEETCODE, handle)
    return result.value
