"""FastAPI dependency injection for database sessions, the acting user, and the task queue."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.background import TaskQueue
from canvass_api.core.config import Settings, get_settings
from canvass_api.core.database import get_session_factory
from canvass_api.core.errors import NotAuthorizedError
from canvass_api.core.security import decode_token
from canvass_api.lib.geocoder import CanvassGeocoder
from canvass_api.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login", auto_error=False)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Decode the bearer JWT and return the acting volunteer.

    Raises:
        NotAuthorizedError: If the token is missing or invalid, or the user
            is unknown or inactive.
    """
    if not token:
        raise NotAuthorizedError("Authentication required")
    try:
        payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    except Exception as exc:
        raise NotAuthorizedError("Could not validate credentials") from exc

    username: str | None = payload.get("sub")
    if username is None:
        raise NotAuthorizedError("Could not validate credentials")

    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise NotAuthorizedError("Could not validate credentials")
    return user


def get_task_queue(request: Request) -> TaskQueue:
    """Return the score aggregation queue created at startup."""
    return request.app.state.task_queue


def get_geocoder(request: Request) -> CanvassGeocoder:
    """Return the tiered geocoder created at startup."""
    return request.app.state.geocoder
