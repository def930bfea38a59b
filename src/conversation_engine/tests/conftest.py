"""
Core pytest configuration for the entire test suite.

This module provides only the essential database setup and core utilities
that are needed across ALL types of tests (queries, repositories, services, logging, ...).

Domain-specific fixtures (seeded organizations, campaigns, contacts, ...) are located in:
- tests/test_fixtures/conversation_fixtures.py

Every test gets its own file-backed SQLite database under pytest's `tmp_path`, so tests that
call `commit()` (the reassignment service does, once per chunk) stay isolated without
savepoint tricks.
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import os
import logging
from pathlib import Path
from urllib.parse import urlparse
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Set the level for noisy third-party loggers at import time (before importing modules that
# might initialize them). This prevents log spam during pytest collection (Faker, SQLAlchemy, etc.).
#
# IMPORTANT: keep this block at the very top (before importing conversation_engine.* modules or
# any test fixtures that may import heavy libraries).
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "aiosqlite",
    "redis",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from faker import Faker
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
)

# Import project modules AFTER we have set the noisy logger levels above.
from conversation_engine.database.base import Base
from conversation_engine import models  # noqa: F401 - import to register models with Base.metadata
from conversation_engine.config import Settings
from conversation_engine.core.logging.builder import setup_logging

logger = logging.getLogger(__name__)


# -------------------------------
# Logging: install project logging once per session
# -------------------------------
@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install the project's dictConfig for the whole session.

    Console-only text output keeps failures readable; the JSON formatter and the
    file handlers have their own tests under tests/test_logging.
    """
    setup_logging(Settings(ENV="testing", LOG_FORMAT="text", LOG_LEVEL="WARNING", LOG_TO_STDOUT=True))
    yield


# ------------------------------------------------------------------------------------------------
# Determining the Test Database URL
# ------------------------------------------------------------------------------------------------


def safe_log_db_url(db_url: str) -> str:
    """
    Return the database URL without credentials, for logging.
    """
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url(tmp_path: Path) -> str:
    """
    Determine the test database URL.

    1. `TEST_DATABASE_URL` environment variable (CI against a real Postgres)
    2. A throwaway SQLite file inside the test's tmp_path
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url
    return f"sqlite+aiosqlite:///{tmp_path / 'conversations.db'}"


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    url = get_test_database_url(tmp_path)
    logger.debug("Using test DB: %s", safe_log_db_url(url))
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    One AsyncSession per test, bound to the test's own database.

    `expire_on_commit=False` so seeded objects keep their ids readable after the
    service under test commits.
    """
    maker = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
        await session.rollback()


@pytest.fixture()
def settings() -> Settings:
    """Settings built explicitly so a developer's .env never leaks into assertions."""
    return Settings(
        ENV="testing",
        CONVERSATIONS_RECENT=False,
        CONVERSATIONS_COUNT_TIMEOUT_MS=4000,
        MAX_CONTACTS_PER_TEXTER=0,
        REDIS_URL=None,
    )


@pytest.fixture()
def faker() -> Faker:
    fake = Faker()
    Faker.seed(1234)
    return fake


# Seeded-data fixtures
from .test_fixtures.conversation_fixtures import (  # noqa: E402,F401
    seed,
    conversation_world,
)
