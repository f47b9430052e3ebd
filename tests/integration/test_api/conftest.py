"""Fixtures for API tests: a minimal app wired to the test database and fakes."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from canvass_api.api.router import create_router
from canvass_api.core.config import Settings, get_settings
from canvass_api.core.dependencies import get_async_session, get_geocoder, get_task_queue
from canvass_api.main import register_exception_handlers
from tests.conftest import FakeGeocoder, RecordingQueue


@pytest.fixture
def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    geocoder: FakeGeocoder,
    task_queue: RecordingQueue,
) -> FastAPI:
    """App with the real routers and exception handlers; real auth against the test database."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(create_router(settings))

    async def _session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    app.dependency_overrides[get_task_queue] = lambda: task_queue
    return app


@pytest.fixture
def client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def auth_headers(volunteer_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {volunteer_token}"}
