"""Async SQLAlchemy engine and session factory.

PostgreSQL goes through psycopg3 (``postgresql+psycopg://``); SQLite through
aiosqlite (``sqlite+aiosqlite://``) for local runs and tests.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async SQLAlchemy engine with production-ready pool settings.

    Default pool parameters (server backends only):

    - **pool_size=5**: baseline connections kept open.
    - **max_overflow=10**: burst capacity above pool_size.
    - **pool_pre_ping=True**: test connections before checkout to handle
      server-side disconnects (PG restarts, idle timeouts).
    - **pool_recycle=3600**: recycle connections after 1 hour.

    SQLite gets no pool tuning; an in-memory database is pinned to a single
    connection with ``StaticPool`` so every session sees the same data.

    All defaults can be overridden via *kwargs*.
    """
    url = make_url(database_url)
    defaults: dict[str, object] = {"echo": False}
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            defaults["poolclass"] = StaticPool
            defaults["connect_args"] = {"check_same_thread": False}
    else:
        defaults.update(pool_size=5, max_overflow=10, pool_pre_ping=True, pool_recycle=3600)
    defaults.update(kwargs)
    return create_async_engine(database_url, **defaults)  # type: ignore[arg-type]


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    ``expire_on_commit=False`` so that ORM instances remain usable after
    commit without triggering lazy loads (implicit IO is forbidden in async).
    """
    return async_sessionmaker(engine, expire_on_commit=False)
