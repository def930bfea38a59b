from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from conversation_engine.config import get_settings


def _make_engine(url: str) -> AsyncEngine:
    settings = get_settings()
    return create_async_engine(
        url,
        echo=settings.SQLALCHEMY_ECHO,
        pool_pre_ping=True,              # Enables connection health checks
    )


# Engines are created lazily so importing this module never opens a pool.
@lru_cache()
def get_engine() -> AsyncEngine:
    """Primary (read-write) engine."""
    return _make_engine(get_settings().DATABASE_URL)


@lru_cache()
def get_readonly_engine() -> AsyncEngine:
    """
    Read-replica engine used by the conversation list queries.

    When no replica is configured both engines point at the same database but
    keep separate pools, so heavy list traffic cannot starve writes.
    """
    return _make_engine(get_settings().DATABASE_READONLY_URL)


@lru_cache()
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=get_engine(), class_=AsyncSession, expire_on_commit=False)


@lru_cache()
def get_readonly_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=get_readonly_engine(), class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session and make sure it is closed afterwards.

    Usage:
        async with session_scope(readonly=True) as db:
            await db.execute(...)
    """
    maker = get_readonly_sessionmaker() if readonly else get_sessionmaker()
    async with maker() as session:
        yield session


async def dispose_engines() -> None:
    """Close both connection pools (call on shutdown)."""
    await get_engine().dispose()
    await get_readonly_engine().dispose()
