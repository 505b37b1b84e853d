"""Database session management for async SQLAlchemy.

This module provides async database session management using SQLAlchemy's
async engine and session factories. It's designed for use with FastAPI's
dependency injection system: every request gets one session, committed when
the request succeeds and rolled back when anything raises.
"""

import ssl
from functools import lru_cache
from typing import Any, AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dscommerce.config import DatabaseConfig, get_config
from dscommerce.logging_config import get_logger

logger = get_logger(__name__)


def normalize_database_url(url: str) -> str:
    """Map sync driver URLs onto their async drivers."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _parse_database_url(url: str) -> tuple[str, dict]:
    """Parse the database URL and extract asyncpg-incompatible params.

    asyncpg doesn't support sslmode in the URL, so we need to extract it
    and convert to SSL context for connect_args.

    Returns:
        Tuple of (cleaned_url, connect_args)
    """
    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)

    sslmode = query_params.pop("sslmode", [None])[0]

    new_query = urlencode({k: v[0] for k, v in query_params.items()}, doseq=False)
    cleaned_url = urlunparse((
        parsed.scheme,
        parsed.netloc,
        parsed.path,
        parsed.params,
        new_query,
        parsed.fragment,
    ))

    connect_args: dict = {}
    if sslmode in ("require", "verify-ca", "verify-full"):
        ssl_context = ssl.create_default_context()
        if sslmode == "require":
            # Encrypt without verifying the certificate
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_context

    return cleaned_url, connect_args


def configure_sqlite_engine(engine: AsyncEngine) -> None:
    """Enable foreign keys and proper SAVEPOINT support on SQLite connections.

    SQLite ignores REFERENCES clauses unless the pragma is set per connection,
    which would silently allow deleting products that orders still reference.
    The driver's implicit transaction handling is disabled so that BEGIN is
    emitted by SQLAlchemy and nested transactions behave as on Postgres.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_engine_from_config(config: DatabaseConfig) -> AsyncEngine:
    """Create an async engine for the configured database."""
    url = normalize_database_url(config.url)

    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=config.echo)
        configure_sqlite_engine(engine)
        return engine

    cleaned_url, connect_args = _parse_database_url(url)
    return create_async_engine(
        cleaned_url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Process-wide engine, created on first use."""
    return create_engine_from_config(get_config().database)


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Process-wide session factory bound to get_engine()."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides a database session.

    Usage:
        @router.get("/products/{id}")
        async def get_product(id: int, db: AsyncSession = Depends(get_db)):
            return await db.get(Product, id)

    Yields:
        AsyncSession: committed after the request handler returns, rolled
            back if it raises, and always closed.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_schema(engine: AsyncEngine, drop_first: bool = False) -> None:
    """Create all tables (optionally dropping existing ones first)."""
    from dscommerce.db.models import Base

    async with engine.begin() as conn:
        if drop_first:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_schema_created", dropped=drop_first)


async def check_db(engine: AsyncEngine) -> None:
    """Verify database connectivity.

    Raises:
        Exception: Whatever the driver raises when the database is unreachable
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Close database connections.

    This should be called during application shutdown.
    """
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        logger.info("database_connections_closed")
