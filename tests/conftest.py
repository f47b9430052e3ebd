"""Shared test fixtures for async database, sessions, geocoding, the task queue, and auth tokens."""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

import canvass_api.models  # noqa: F401
from canvass_api.core.config import Settings
from canvass_api.core.security import create_access_token
from canvass_api.lib.geocoder import GeocodingProviderError, ReverseGeocodeResult, VerifiedAddress
from canvass_api.models.address import Address
from canvass_api.models.base import Base
from canvass_api.models.score import Score
from canvass_api.models.user import User
from canvass_api.models.visit import Visit


class FakeGeocoder:
    """Stand-in for ``CanvassGeocoder`` that records calls.

    Reverse geocoding echoes the submitted coordinates unless ``corrected``
    is set. Verification returns ``verified``.
    """

    def __init__(
        self,
        corrected: tuple[float, float] | None = None,
        verified: VerifiedAddress | None = None,
    ) -> None:
        self.corrected = corrected
        self.verified = verified
        self.reverse_error: GeocodingProviderError | None = None
        self.verify_error: GeocodingProviderError | None = None
        self.reverse_finds_nothing = False
        self.reverse_calls: list[tuple[float, float]] = []
        self.verify_calls: list[str] = []

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        self.reverse_calls.append((latitude, longitude))
        if self.reverse_error is not None:
            raise self.reverse_error
        if self.reverse_finds_nothing:
            return None
        lat, lng = self.corrected or (latitude, longitude)
        return ReverseGeocodeResult(latitude=lat, longitude=lng)

    async def forward_verify(self, street_address: str) -> VerifiedAddress | None:
        self.verify_calls.append(street_address)
        if self.verify_error is not None:
            raise self.verify_error
        return self.verified


class RecordingQueue:
    """Task queue that only records enqueued score ids."""

    def __init__(self) -> None:
        self.score_ids: list[uuid.UUID] = []

    def enqueue(self, score_id: uuid.UUID) -> str:
        self.score_ids.append(score_id)
        return f"job-{len(self.score_ids)}"


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        _env_file=None,
    )  # type: ignore[call-arg]


@pytest.fixture
async def async_engine(settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def geocoder() -> FakeGeocoder:
    """Geocoder that echoes coordinates and verifies to a fixed postal address."""
    return FakeGeocoder(
        verified=VerifiedAddress(
            street_1="5 AVENUE A",
            street_2="",
            city="NEW YORK",
            state="NY",
            zip="10009-7944",
        )
    )


@pytest.fixture
def task_queue() -> RecordingQueue:
    """Task queue that records instead of running aggregation."""
    return RecordingQueue()


async def _create_user(
    session: AsyncSession,
    username: str,
    *,
    state_code: str | None = "NY",
    total_points: int = 0,
    is_active: bool = True,
) -> User:
    """Insert and commit a volunteer."""
    user = User(
        id=uuid.uuid4(),
        username=username,
        email=f"{username}@test.com",
        role="volunteer",
        state_code=state_code,
        total_points=total_points,
        is_active=is_active,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def make_user(async_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory fixture: ``await make_user("name", state_code=..., total_points=...)``."""

    async def _make(username: str, **kwargs: Any) -> User:
        return await _create_user(async_session, username, **kwargs)

    return _make


@pytest.fixture
async def volunteer(async_session: AsyncSession) -> User:
    """A volunteer in New York with no points."""
    return await _create_user(async_session, "canvasser")


@pytest.fixture
def volunteer_token(settings: Settings) -> str:
    """Generate a JWT access token for the ``volunteer`` fixture."""
    return create_access_token(
        subject="canvasser",
        role="volunteer",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


async def record_points(session: AsyncSession, user: User, points: int) -> Score:
    """Insert and commit a scored visit worth ``points`` for ``user``."""
    address = Address(id=uuid.uuid4(), street_1=f"{points} Main St")
    visit = Visit(
        id=uuid.uuid4(),
        user_id=user.id,
        address_id=address.id,
        duration_sec=60,
        corrected_latitude=40.0,
        corrected_longitude=-73.0,
        total_points=points,
    )
    score = Score(id=uuid.uuid4(), visit_id=visit.id, points_for_knock=5, points_for_updates=points - 5)
    session.add(address)
    await session.flush()
    session.add(visit)
    await session.flush()
    session.add(score)
    await session.commit()
    return score
