"""Integration test fixtures.

Every test gets a fresh in-memory SQLite database loaded with the demo
dataset, and an httpx client talking to the ASGI app in-process.
"""

from typing import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dscommerce.api.app import app
from dscommerce.config import get_config
from dscommerce.db.seed import seed_database
from dscommerce.db.session import configure_sqlite_engine, create_schema, get_db

PASSWORD = "123456"

TokenFactory = Callable[[str], Awaitable[str]]
HeadersFactory = Callable[[str], Awaitable[dict[str, str]]]


@pytest.fixture
async def engine():
    """Seeded in-memory database shared by all sessions of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite_engine(engine)
    await create_schema(engine)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        await seed_database(session, bcrypt_rounds=4)
        await session.commit()

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A separate session for asserting on database state."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with get_db bound to the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def token_for(client: AsyncClient) -> TokenFactory:
    """Obtain an access token for a seeded user through the token endpoint."""
    security = get_config().security

    async def _token_for(username: str, password: str = PASSWORD) -> str:
        response = await client.post(
            "/oauth2/token",
            data={"grant_type": "password", "username": username, "password": password},
            auth=(security.client_id, security.client_secret),
        )
        assert response.status_code == 200, response.text
        return response.json()["access_token"]

    return _token_for


@pytest.fixture
def auth_headers(token_for: TokenFactory) -> HeadersFactory:
    """Bearer Authorization header for a seeded user."""

    async def _auth_headers(username: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {await token_for(username)}"}

    return _auth_headers
