"""Leaderboard service — aggregate volunteer points into ranked boards.

Aggregation runs after a visit commits and may be delivered more than once
and out of order. Every step is a full recount or a full rewrite from the
current ``users.total_points``, so replays converge on the same rows.
"""

import uuid
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.lib.canvass import assign_ranks
from canvass_api.models.friendship import Friendship
from canvass_api.models.ranking import Ranking, RankingScope
from canvass_api.models.score import Score
from canvass_api.models.user import User
from canvass_api.models.visit import Visit

# Concurrent rewrites of the same board can collide on the unique constraint
_REWRITE_ATTEMPTS = 3


@dataclass
class LeaderboardRow:
    """A ranked (user, score) pair returned by the ranking queries."""

    user: User
    score: int
    rank: int


@dataclass
class RebuildSummary:
    users: int = 0
    boards: int = 0


async def recount_user_total(session: AsyncSession, user_id: uuid.UUID) -> int:
    """Set ``users.total_points`` to the sum of the user's visit points (no commit).

    Returns:
        The recounted total.
    """
    total = await session.scalar(
        select(func.coalesce(func.sum(Visit.total_points), 0)).where(Visit.user_id == user_id)
    )
    total = int(total or 0)
    await session.execute(update(User).where(User.id == user_id).values(total_points=total))
    return total


async def _friend_ids(session: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    result = await session.execute(select(Friendship.friend_id).where(Friendship.user_id == user_id))
    return list(result.scalars().all())


async def _boards_listing(session: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    """Owners of friends boards on which ``user_id`` appears."""
    result = await session.execute(select(Friendship.user_id).where(Friendship.friend_id == user_id))
    return list(result.scalars().all())


async def _scope_members(
    session: AsyncSession, scope: RankingScope, scope_key: str
) -> list[tuple[uuid.UUID, str, int]]:
    query = select(User.id, User.username, User.total_points).where(User.is_active.is_(True))
    if scope == RankingScope.STATE:
        query = query.where(User.state_code == scope_key)
    elif scope == RankingScope.FRIENDS:
        owner_id = uuid.UUID(scope_key)
        friend_ids = await _friend_ids(session, owner_id)
        query = query.where(User.id.in_([owner_id, *friend_ids]))
    result = await session.execute(query)
    return [(row.id, row.username, row.total_points) for row in result.all()]


async def recompute_scope(session: AsyncSession, scope: RankingScope, scope_key: str = "") -> int:
    """Delete and rewrite one board in a single transaction.

    Args:
        session: Async database session.
        scope: Board partition.
        scope_key: "" for everyone, a state code, or the friends-board owner id.

    Returns:
        Number of Ranking rows written.
    """
    for attempt in range(1, _REWRITE_ATTEMPTS + 1):
        members = await _scope_members(session, scope, scope_key)
        entries = assign_ranks(members)
        await session.execute(delete(Ranking).where(Ranking.scope == scope.value, Ranking.scope_key == scope_key))
        session.add_all(
            Ranking(
                scope=scope.value,
                scope_key=scope_key,
                user_id=entry.user_id,
                score=entry.score,
                rank=entry.rank,
            )
            for entry in entries
        )
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            if attempt == _REWRITE_ATTEMPTS:
                raise
            logger.warning(f"Concurrent rewrite of {scope.value} board {scope_key!r}; retrying ({attempt})")
            continue
        logger.debug(f"Rewrote {scope.value} board {scope_key!r} with {len(entries)} rows")
        return len(entries)
    return 0


async def recompute_for_user(session: AsyncSession, user_id: uuid.UUID) -> int:
    """Rewrite every board the user appears on.

    Returns:
        Number of boards rewritten.
    """
    user = await session.get(User, user_id)
    if user is None:
        logger.warning(f"User {user_id} vanished before leaderboard recompute")
        return 0
    state_code = user.state_code

    boards = 0
    await recompute_scope(session, RankingScope.EVERYONE)
    boards += 1
    if state_code:
        await recompute_scope(session, RankingScope.STATE, state_code)
        boards += 1
    await recompute_scope(session, RankingScope.FRIENDS, str(user_id))
    boards += 1
    for owner_id in await _boards_listing(session, user_id):
        await recompute_scope(session, RankingScope.FRIENDS, str(owner_id))
        boards += 1
    return boards


async def on_score_created(session: AsyncSession, score_id: uuid.UUID) -> None:
    """Aggregate a committed Score into the user's total and leaderboards.

    Safe to replay: the total is recounted from visits and each board is
    rewritten from current totals. A missing score is logged and ignored.
    """
    row = (
        await session.execute(
            select(Score.id, Visit.user_id).join(Visit, Visit.id == Score.visit_id).where(Score.id == score_id)
        )
    ).one_or_none()
    if row is None:
        logger.warning(f"Score {score_id} not found; skipping aggregation")
        return

    user_id = row.user_id
    total = await recount_user_total(session, user_id)
    await session.commit()
    logger.info(f"User {user_id} total recounted to {total} after score {score_id}")

    boards = await recompute_for_user(session, user_id)
    logger.bind(json_output=True).info(f"Aggregated score {score_id}: {boards} boards rewritten")


async def rebuild_all(session: AsyncSession) -> RebuildSummary:
    """Recount every user's total and rewrite every board.

    Recovery path for drift, e.g. after aggregation jobs were lost.
    """
    summary = RebuildSummary()
    user_ids = list((await session.execute(select(User.id))).scalars().all())
    for user_id in user_ids:
        await recount_user_total(session, user_id)
    await session.commit()
    summary.users = len(user_ids)

    await recompute_scope(session, RankingScope.EVERYONE)
    summary.boards += 1

    states = (
        await session.execute(select(User.state_code).where(User.state_code.is_not(None)).distinct())
    ).scalars().all()
    for state_code in states:
        await recompute_scope(session, RankingScope.STATE, state_code)
        summary.boards += 1

    for user_id in user_ids:
        await recompute_scope(session, RankingScope.FRIENDS, str(user_id))
        summary.boards += 1

    logger.info(f"Rebuilt leaderboards: {summary.users} users, {summary.boards} boards")
    return summary


async def _board(
    session: AsyncSession,
    scope: RankingScope,
    scope_key: str,
    user_id: uuid.UUID,
    limit: int,
) -> list[LeaderboardRow]:
    base = (
        select(Ranking, User)
        .join(User, User.id == Ranking.user_id)
        .where(Ranking.scope == scope.value, Ranking.scope_key == scope_key)
    )
    result = await session.execute(base.order_by(Ranking.rank, User.username).limit(limit))
    rows = [LeaderboardRow(user=user, score=ranking.score, rank=ranking.rank) for ranking, user in result.all()]

    # The caller always sees their own line, even below the page
    if all(row.user.id != user_id for row in rows):
        own = (await session.execute(base.where(Ranking.user_id == user_id))).one_or_none()
        if own is not None:
            ranking, user = own
            rows.append(LeaderboardRow(user=user, score=ranking.score, rank=ranking.rank))
    return rows


async def for_everyone(session: AsyncSession, user_id: uuid.UUID, *, limit: int = 50) -> list[LeaderboardRow]:
    """Everyone board, best first, plus the caller's own line if off the page."""
    return await _board(session, RankingScope.EVERYONE, "", user_id, limit)


async def for_state(
    session: AsyncSession, user_id: uuid.UUID, state_code: str, *, limit: int = 50
) -> list[LeaderboardRow]:
    """State board for ``state_code``, best first."""
    return await _board(session, RankingScope.STATE, state_code.upper(), user_id, limit)


async def for_friends(session: AsyncSession, user_id: uuid.UUID, *, limit: int = 50) -> list[LeaderboardRow]:
    """The caller's friends board (friends plus the caller), best first."""
    return await _board(session, RankingScope.FRIENDS, str(user_id), user_id, limit)
