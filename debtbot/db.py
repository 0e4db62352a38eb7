"""Database connection setup for DebtBot.

The bot keeps its data in a single SQLite file accessed through SQLAlchemy's
async engine and the ``aiosqlite`` driver.  ``main`` builds one engine and
one session factory at startup and hands the factory to the storage gateway.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .models import Base


def make_engine(url: str) -> AsyncEngine:
    """Create the async engine for ``url``.

    ``echo=False`` keeps SQL out of the logs.
    """
    return create_async_engine(url, echo=False, future=True)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # ``expire_on_commit=False`` keeps returned rows readable after the
    # session that loaded them is closed.
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create all database tables if they do not already exist.

    Called once at application startup.  Fails loudly if the database file
    cannot be opened.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
