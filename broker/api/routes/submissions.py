from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from broker.api.dependencies import get_broker
from broker.core.config import settings
from broker.schemas.submissions import (
    DailyStatsRequest,
    DailyStatsResponse,
    FriendStats,
    SubmissionSummary,
)
from broker.services.broker import RequestBroker
from broker.services.platforms import Platform, fetch_platform_submissions
from broker.services.submissions import count_accepted_today, extract_submissions

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Submissions"])

BrokerDep = Annotated[RequestBroker, Depends(get_broker)]


async def _summarize(broker: RequestBroker, platform: Platform, handle: str) -> SubmissionSummary:
    result = await fetch_platform_submissions(broker, platform, handle)
    submissions = extract_submissions(result.value, platform.value)
    return SubmissionSummary(
        platform=platform.value,
        handle=handle.strip(),
        outcome=result.outcome.value,
        total_submissions=len(submissions),
        accepted_today=count_accepted_today(submissions, platform.value),
    )


@router.get("/submissions/{platform}/{handle}", response_model=SubmissionSummary)
async def get_submissions(platform: Platform, handle: str, broker: BrokerDep) -> SubmissionSummary:
    """Summarize a user's submissions on one platform.

    Upstream failures do not produce an error response: the summary is built
    from stale cached data or an empty feed, as reported by `outcome`.

    Raises:
        ValidationAppError: 400 when the handle is blank.
    """
    return await _summarize(broker, platform, handle)


@router.post("/daily-stats", response_model=DailyStatsResponse)
async def daily_stats(payload: DailyStatsRequest, broker: BrokerDep) -> DailyStatsResponse:
    """Compute today's accepted submissions for a list of friends.

    Friends are fetched one after another, in request order, through the
    shared broker. Platforms without a handle count as zero.
    """
    goal = settings.app.daily_goal
    rows: list[FriendStats] = []

    for friend in payload.friends:
        counts: dict[str, int] = {}
        for platform, handle in (
            (Platform.CODEFORCES, friend.codeforces),
            (Platform.LEETCODE, friend.leetcode),
        ):
            if handle and handle.strip():
                summary = await _summarize(broker, platform, handle)
                counts[platform.value] = summary.accepted_today
            else:
                counts[platform.value] = 0

        total = counts["codeforces"] + counts["leetcode"]
        rows.append(
            FriendStats(
                name=friend.name,
                codeforces_today=counts["codeforces"],
                leetcode_today=counts["leetcode"],
                total_today=total,
                is_champion=total >= goal,
            )
        )

    champions = [row.name for row in rows if row.is_champion]
    if champions:
        logger.info("daily_stats.champions", extra={"count": len(champions)})

    return DailyStatsResponse(daily_goal=goal, friends=rows, champions=champions)


@router.get("/broker/stats")
async def broker_stats(broker: BrokerDep) -> dict[str, Any]:
    """Expose cache, rate window, backoff and queue counters."""
    return broker.stats()
