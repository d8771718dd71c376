"""Shared test fixtures for the Researcher Portal backend."""

from collections.abc import AsyncGenerator

import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import Environment, Settings
from app.main import create_app
from db.models import Base
from gateway.session import SessionManager

RESEARCHER_A = "researcher-a"
RESEARCHER_B = "researcher-b"


@pytest.fixture
def test_settings() -> Settings:
    """Provide test settings with safe defaults."""
    return Settings(
        environment=Environment.TESTING,
        debug=True,
        database_url="sqlite+aiosqlite://",
        redis_url="redis://localhost:6379/15",
        cors_origins=["http://localhost:3000"],
    )


@pytest.fixture
async def fake_redis() -> AsyncGenerator:
    """Provide a fake Redis instance for testing."""
    server = fakeredis.FakeServer()
    redis = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    yield redis
    await redis.aclose()


@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(fake_redis, session_factory):
    """Test application with Redis and database dependencies overridden."""
    from app.dependencies import get_redis
    from db.session import get_db_session

    application = create_app()

    async def _override_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_redis] = lambda: fake_redis
    application.dependency_overrides[get_db_session] = _override_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator:
    """Provide an async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def auth_headers(fake_redis) -> dict[str, str]:
    """Session header for researcher A."""
    session_id = await SessionManager(fake_redis).create(RESEARCHER_A)
    return {"X-Session-ID": session_id}


@pytest.fixture
async def other_auth_headers(fake_redis) -> dict[str, str]:
    """Session header for researcher B."""
    session_id = await SessionManager(fake_redis).create(RESEARCHER_B)
    return {"X-Session-ID": session_id}
