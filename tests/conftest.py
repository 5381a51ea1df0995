"""Shared test fixtures: database sessions.

DB-backed tests run against a fresh in-memory SQLite database (aiosqlite) per
test, with the schema created from ``Base.metadata``.  Set
``NOTEBRIDGE_TEST_POSTGRES=1`` to run them against a PostgreSQL container
managed by testcontainers-python instead: the container is session-scoped,
Alembic migrations are applied once, and each test gets an isolated session
via savepoint rollback.  That mode requires Docker.

Tests needing a database should be marked with ``@pytest.mark.integration``.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from notebridge.note_service.db.engine import create_engine, create_session_factory
from notebridge.note_service.db.tables import Base
from notebridge.note_service.settings import _get_settings_cached

USE_POSTGRES = os.getenv("NOTEBRIDGE_TEST_POSTGRES") == "1"


def _set_env(key: str, value: str) -> None:
    """Set an env var and invalidate the settings cache."""
    os.environ[key] = value
    _get_settings_cached.cache_clear()


# ---------------------------------------------------------------------------
# Session-scoped: PostgreSQL container with migrations applied (opt-in)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_engine() -> Iterator[AsyncEngine]:
    """Async engine on a PostgreSQL 17 container, migrated to head."""
    from alembic import command
    from alembic.config import Config
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(
        image="postgres:17",
        username="test",
        password="test",
        dbname="notebridge_test",
        driver="psycopg",
    ) as pg:
        url = pg.get_connection_url()
        _set_env("NOTEBRIDGE_DATABASE_URL", url)

        # Apply all migrations using the packaged alembic.ini (same config as CLI).
        ini_path = Path(__file__).parent.parent / "notebridge" / "note_service" / "alembic.ini"
        command.upgrade(Config(str(ini_path)), "head")

        engine = create_async_engine(url, poolclass=NullPool)
        yield engine
        engine.sync_engine.dispose()


# ---------------------------------------------------------------------------
# Function-scoped: isolated DB session
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_session(request: pytest.FixtureRequest) -> AsyncIterator[AsyncSession]:
    """Async SQLAlchemy session with no state carried over between tests.

    On PostgreSQL, ``join_transaction_mode="create_savepoint"`` makes
    ``session.commit()`` inside tested code commit only a savepoint, while the
    outer transaction is rolled back at teardown.
    """
    if USE_POSTGRES:
        engine: AsyncEngine = request.getfixturevalue("pg_engine")
        async with engine.connect() as conn:
            await conn.begin()
            session = AsyncSession(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
            yield session
            await session.close()
            await conn.rollback()
        return

    engine = create_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session = create_session_factory(engine)()
    yield session
    await session.close()
    await engine.dispose()
