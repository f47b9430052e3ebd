"""Leaderboard API endpoints.

GET /rankings/everyone — all volunteers
GET /rankings/state — volunteers in one state
GET /rankings/friends — the caller and their friends
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.config import Settings, get_settings
from canvass_api.core.dependencies import get_async_session, get_current_user
from canvass_api.core.errors import ValidationFailedError
from canvass_api.models.ranking import RankingScope
from canvass_api.models.user import User
from canvass_api.schemas.ranking import RankingEntry, RankingListResponse
from canvass_api.services import leaderboard_service
from canvass_api.services.leaderboard_service import LeaderboardRow

rankings_router = APIRouter(prefix="/rankings", tags=["rankings"])


def _to_response(scope: RankingScope, scope_key: str, rows: list[LeaderboardRow]) -> RankingListResponse:
    return RankingListResponse(
        scope=scope.value,
        scope_key=scope_key,
        items=[
            RankingEntry(rank=row.rank, user_id=row.user.id, username=row.user.username, score=row.score)
            for row in rows
        ],
    )


@rankings_router.get("/everyone", response_model=RankingListResponse)
async def everyone(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RankingListResponse:
    """Everyone leaderboard."""
    rows = await leaderboard_service.for_everyone(session, current_user.id, limit=settings.ranking_page_size)
    return _to_response(RankingScope.EVERYONE, "", rows)


@rankings_router.get("/state", response_model=RankingListResponse)
async def state(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    settings: Annotated[Settings, Depends(get_settings)],
    state_code: str | None = Query(
        default=None, min_length=2, max_length=2, description="Two-letter state code; defaults to the caller's"
    ),
) -> RankingListResponse:
    """State leaderboard."""
    code = (state_code or current_user.state_code or "").upper()
    if not code:
        raise ValidationFailedError({"state_code": "required when the user has no state"})
    rows = await leaderboard_service.for_state(session, current_user.id, code, limit=settings.ranking_page_size)
    return _to_response(RankingScope.STATE, code, rows)


@rankings_router.get("/friends", response_model=RankingListResponse)
async def friends(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RankingListResponse:
    """The caller's friends leaderboard."""
    rows = await leaderboard_service.for_friends(session, current_user.id, limit=settings.ranking_page_size)
    return _to_response(RankingScope.FRIENDS, str(current_user.id), rows)
