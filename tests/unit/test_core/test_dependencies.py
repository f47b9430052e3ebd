"""Tests for FastAPI dependency injection module."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.config import Settings
from canvass_api.core.dependencies import get_current_user, get_geocoder, get_task_queue
from canvass_api.core.errors import NotAuthorizedError
from canvass_api.core.security import create_access_token
from canvass_api.models.user import User


class TestGetCurrentUser:
    """Tests for bearer token resolution."""

    @pytest.mark.asyncio
    async def test_valid_token_returns_user(
        self, async_session: AsyncSession, settings: Settings, volunteer: User, volunteer_token: str
    ) -> None:
        user = await get_current_user(token=volunteer_token, session=async_session, settings=settings)
        assert user.id == volunteer.id

    @pytest.mark.asyncio
    async def test_missing_token_raises(self, async_session: AsyncSession, settings: Settings) -> None:
        with pytest.raises(NotAuthorizedError, match="Authentication required"):
            await get_current_user(token=None, session=async_session, settings=settings)

    @pytest.mark.asyncio
    async def test_garbage_token_raises(self, async_session: AsyncSession, settings: Settings) -> None:
        with pytest.raises(NotAuthorizedError):
            await get_current_user(token="not-a-jwt", session=async_session, settings=settings)

    @pytest.mark.asyncio
    async def test_unknown_user_raises(self, async_session: AsyncSession, settings: Settings) -> None:
        token = create_access_token("ghost", "volunteer", settings.jwt_secret_key)
        with pytest.raises(NotAuthorizedError):
            await get_current_user(token=token, session=async_session, settings=settings)

    @pytest.mark.asyncio
    async def test_inactive_user_raises(self, async_session: AsyncSession, settings: Settings, make_user) -> None:
        await make_user("retired", is_active=False)
        token = create_access_token("retired", "volunteer", settings.jwt_secret_key)
        with pytest.raises(NotAuthorizedError):
            await get_current_user(token=token, session=async_session, settings=settings)


class TestAppStateDependencies:
    """The geocoder and task queue come from app state."""

    def test_task_queue_from_app_state(self) -> None:
        request = MagicMock()
        assert get_task_queue(request) is request.app.state.task_queue

    def test_geocoder_from_app_state(self) -> None:
        request = MagicMock()
        assert get_geocoder(request) is request.app.state.geocoder
