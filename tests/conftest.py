"""
Pytest fixtures for test database, client, authentication and routing.

Each test gets a fresh in-memory SQLite database with all tables created,
and the routing gateway is replaced by an in-process fake.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "")
os.environ.setdefault("OPENAI_API_KEY", "")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from campus_compass.main import app
from campus_compass.api.deps import get_routing_gateway
from campus_compass.db.base import Base
from campus_compass.db.session import get_db
from campus_compass.core.security import create_access_token, hash_password
from campus_compass.models.event import Event, EventCategory
from campus_compass.models.university import University
from campus_compass.models.user import User
from campus_compass.services.routing import Route, RoutingError

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeRoutingGateway:
    """Walking routes from a lookup table keyed by destination."""

    def __init__(self):
        self.default_seconds: Optional[int] = 12 * 60
        self.durations: dict[tuple[float, float], int] = {}
        self.error: Optional[Exception] = None
        self.calls = []

    async def walking_route(self, origin, destination) -> Route:
        self.calls.append((origin, destination))
        if self.error is not None:
            raise self.error
        seconds = self.durations.get((destination.lat, destination.lng), self.default_seconds)
        if seconds is None:
            raise RoutingError("ZERO_RESULTS")
        return Route(duration_seconds=seconds, distance_meters=seconds, distance_text="1.0 km")


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def routing_gateway() -> FakeRoutingGateway:
    return FakeRoutingGateway()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    routing_gateway: FakeRoutingGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB and routing dependencies."""

    async def override_get_db():
        yield db_session

    async def override_get_routing_gateway():
        yield routing_gateway

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_routing_gateway] = override_get_routing_gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def ucla(db_session: AsyncSession) -> University:
    university = University(
        id="ucla",
        name="University of California, Los Angeles",
        tz="America/Los_Angeles",
        center_lat=34.0689,
        center_lng=-118.4452,
    )
    db_session.add(university)
    await db_session.commit()
    return university


@pytest_asyncio.fixture
async def berkeley(db_session: AsyncSession) -> University:
    university = University(
        id="berkeley",
        name="University of California, Berkeley",
        tz="America/Los_Angeles",
        center_lat=37.8719,
        center_lng=-122.2585,
    )
    db_session.add(university)
    await db_session.commit()
    return university


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, ucla: University) -> User:
    """Create a test user in the database."""
    user = User(
        email="test@ucla.edu",
        hashed_password=hash_password("testpassword123"),
        university_id=ucla.id,
        interests=[],
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def auth_token(test_user: User) -> str:
    """Generate a JWT token for the test user."""
    return create_access_token(data={"sub": str(test_user.id)})


@pytest_asyncio.fixture
async def auth_headers(auth_token: str) -> dict:
    """Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def make_event(db_session: AsyncSession, ucla: University):
    """Factory for events starting `starts_in` from now."""

    async def _make(
        title: str = "Test Event",
        starts_in: timedelta = timedelta(hours=2),
        popularity: int = 0,
        categories: tuple = (),
        university_id: Optional[str] = None,
        coords: Optional[tuple[float, float]] = (34.0720, -118.4441),
        description: Optional[str] = "A test event",
        location: Optional[str] = "Pauley Pavilion",
        start: Optional[datetime] = None,
    ) -> Event:
        start = start or datetime.now(timezone.utc) + starts_in
        event = Event(
            university_id=university_id or ucla.id,
            title=title,
            description=description,
            start=start,
            end=start + timedelta(hours=1),
            location=location,
            coords_lat=coords[0] if coords else None,
            coords_lng=coords[1] if coords else None,
            popularity=popularity,
            dedupe_key=title.lower().replace(" ", "-"),
            source_ids=[],
            category_links=[EventCategory(name=name) for name in categories],
        )
        db_session.add(event)
        await db_session.commit()
        return event

    return _make


@pytest_asyncio.fixture
async def test_event(make_event) -> Event:
    return await make_event(title="Computer Science Career Fair", categories=("Career", "Technology"))
