"""User service — volunteer records and the friends graph."""

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.models.friendship import Friendship
from canvass_api.models.user import User


class DuplicateUserError(ValueError):
    """Raised when a username or email is already taken."""


class UnknownUserError(ValueError):
    """Raised when a username does not exist."""


async def get_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    *,
    username: str,
    email: str,
    state_code: str | None = None,
    role: str = "volunteer",
) -> User:
    """Create a volunteer.

    Raises:
        DuplicateUserError: If the username or email already exists.
    """
    existing = await session.execute(select(User.id).where((User.username == username) | (User.email == email)))
    if existing.first() is not None:
        msg = f"User '{username}' or email already exists"
        raise DuplicateUserError(msg)

    user = User(
        username=username,
        email=email,
        role=role,
        state_code=state_code.upper() if state_code else None,
        is_active=True,
        total_points=0,
    )
    session.add(user)
    await session.commit()
    logger.info(f"Created user {user.username}")
    return user


async def add_friend(session: AsyncSession, username: str, friend_username: str) -> Friendship | None:
    """Add ``friend_username`` to ``username``'s friends board.

    Returns:
        The new Friendship, or None if it already existed.

    Raises:
        UnknownUserError: If either user does not exist.
        ValueError: If both names are the same user.
    """
    owner = await get_by_username(session, username)
    friend = await get_by_username(session, friend_username)
    for name, user in ((username, owner), (friend_username, friend)):
        if user is None:
            msg = f"User '{name}' not found"
            raise UnknownUserError(msg)
    if owner.id == friend.id:
        msg = "A user cannot befriend themselves"
        raise ValueError(msg)

    existing = await session.execute(
        select(Friendship).where(Friendship.user_id == owner.id, Friendship.friend_id == friend.id)
    )
    if existing.scalar_one_or_none() is not None:
        return None

    friendship = Friendship(user_id=owner.id, friend_id=friend.id)
    session.add(friendship)
    await session.commit()
    logger.info(f"User {owner.username} added friend {friend.username}")
    return friendship
