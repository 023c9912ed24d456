"""Counting of accepted submissions made today.

Dates are compared in the server's local timezone.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

# LeetCode timestamps with more digits than this are in milliseconds.
_SECONDS_TIMESTAMP_DIGITS = 10


def extract_submissions(payload: Any, platform: str) -> list[dict[str, Any]]:
    """Pull the submission list out of a platform payload ([] if absent)."""
    if not isinstance(payload, dict):
        return []
    field = "result" if platform == "codeforces" else "recentSubmissions"
    submissions = payload.get(field)
    return submissions if isinstance(submissions, list) else []


def _local_date(epoch_seconds: float) -> date:
    return datetime.fromtimestamp(epoch_seconds).date()


def _leetcode_epoch_seconds(timestamp: Any) -> float:
    raw = str(timestamp).strip()
    value = int(raw)
    if len(raw) <= _SECONDS_TIMESTAMP_DIGITS:
        return float(value)
    return value / 1000


def count_accepted_today(
    submissions: Iterable[dict[str, Any]],
    platform: str = "codeforces",
    *,
    today: date | None = None,
) -> int:
    """Count submissions accepted on the given day.

    Args:
        submissions: Submission records as returned by the platform.
        platform: "codeforces" or "leetcode"; anything else counts 0.
        today: Day to count for; defaults to the current local date.

    Returns:
        Number of accepted submissions whose timestamp falls on that day.
        Records with a missing or unparsable timestamp are skipped.
    """
    day = today or date.today()
    count = 0

    for sub in submissions:
        try:
            if platform == "codeforces":
                accepted = sub.get("verdict") == "OK"
                submitted = _local_date(float(sub["creationTimeSeconds"]))
            elif platform == "leetcode":
                accepted = sub.get("statusDisplay") == "Accepted"
                submitted = _local_date(_leetcode_epoch_seconds(sub["timestamp"]))
            else:
                return 0
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            continue

        if accepted and submitted == day:
            count += 1

    return count
