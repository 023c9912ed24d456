from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class SubmissionSummary(BaseModel):
    """Today's activity of one user on one platform."""

    platform: Literal["codeforces", "leetcode"]
    handle: str
    outcome: Literal["fresh", "cached", "stale", "default"] = Field(
        ...,
        description="Where the data came from: upstream, fresh cache, stale cache, or empty default",
    )
    total_submissions: int = Field(..., ge=0, description="Submissions present in the feed")
    accepted_today: int = Field(..., ge=0, description="Accepted submissions made today")


class FriendInput(BaseModel):
    name: str = Field(..., min_length=1, description="Display name")
    codeforces: str | None = Field(None, description="Codeforces handle")
    leetcode: str | None = Field(None, description="LeetCode handle")


class DailyStatsRequest(BaseModel):
    friends: list[FriendInput] = Field(default_factory=list)


class FriendStats(BaseModel):
    name: str
    codeforces_today: int = Field(0, ge=0)
    leetcode_today: int = Field(0, ge=0)
    total_today: int = Field(0, ge=0)
    is_champion: bool = Field(
        False,
        description="True when total_today reaches the configured daily goal",
    )


class DailyStatsResponse(BaseModel):
    daily_goal: int
    friends: list[FriendStats]
    champions: list[str] = Field(default_factory=list)
