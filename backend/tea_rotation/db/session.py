"""Async Session Factory — provides async DB sessions for direct usage outside FastAPI.

Invariants:
    - Meant for maintenance scripts and test fixtures
    - Caller owns the returned engine's lifecycle (dispose when done)
    - An in-memory SQLite URL is pinned to one shared connection
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool


def create_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and matching async session factory for the given database URL."""
    kwargs = {}
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # every session must see the same in-memory database
        kwargs["poolclass"] = StaticPool
    engine = create_async_engine(database_url, echo=False, **kwargs)
    return engine, async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
