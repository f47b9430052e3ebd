"""Pydantic v2 schemas for leaderboard endpoints."""

import uuid

from pydantic import BaseModel, Field


class RankingEntry(BaseModel):
    """One leaderboard line."""

    rank: int
    user_id: uuid.UUID
    username: str
    score: int


class RankingListResponse(BaseModel):
    """An ordered leaderboard, best first."""

    scope: str = Field(description="everyone, state, or friends")
    scope_key: str = Field(
        default="", description="State code for state boards, the caller's user id for friends boards, empty otherwise"
    )
    items: list[RankingEntry]
