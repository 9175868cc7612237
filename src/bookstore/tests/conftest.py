"""
Core pytest configuration for the entire test suite.

Only the setup every layer needs lives here: logging, the test database URL and
the engine/session fixtures. Domain fixtures are in:
- tests/test_fixtures/book_fixtures.py   (repositories, sample payloads, seeded rows)
- tests/test_fixtures/api_fixtures.py    (settings, app, TestClient)

They are imported at the bottom of this module so every test can use them
without importing.
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import os
import logging
from pathlib import Path
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Quiet noisy third-party loggers before importing modules that may initialize them.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
    "urllib3",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from pytest import FixtureRequest
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
)

from bookstore.database.base import Base
from bookstore import models  # noqa: F401 – import to register models with Base.metadata
from bookstore.config import get_settings
from bookstore.core.logging.builder import setup_logging
from bookstore.database.session import safe_log_db_url

settings = get_settings()
logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest):
    """
    Install application logging for the whole test session.

    dictConfig replaces the root handlers, which drops pytest's capture handler;
    it is re-attached so tests relying on `caplog.records` keep working.
    """
    setup_logging(settings)

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield


# ------------------------------------------------------------------------------------------------
# Test database URL
# ------------------------------------------------------------------------------------------------

def get_test_database_url(tmp_path: Path) -> str:
    """
    Determine the test database URL.

    1. `TEST_DATABASE_URL` environment variable (CI override, e.g. a Postgres service).
       Tables are created and dropped around each test, by async_engine and by the API client fixtures.
    2. Otherwise a throw-away SQLite file inside the test's tmp_path (aiosqlite driver),
       so every test starts from an empty schema without any server.
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url
    return f"sqlite+aiosqlite:///{tmp_path / 'test_books.db'}"


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    url = get_test_database_url(tmp_path)
    logger.debug(f"Using test DB: {safe_log_db_url(url)}")
    return url


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------

# Function scope: each test gets its own engine bound to its own event loop.
@pytest.fixture()
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(database_url, echo=False, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture()
async def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for tests that need more than one session (e.g. visibility after commit)."""
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    One AsyncSession per test. Repositories only flush, so nothing is committed
    unless the test commits; the schema is dropped afterwards either way.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


# Domain fixtures
from bookstore.tests.test_fixtures.book_fixtures import (  # noqa: E402,F401
    base_repo,
    book_repository,
    sample_book_data,
    create_book,
    created_book,
    multiple_books,
)
from bookstore.tests.test_fixtures.api_fixtures import (  # noqa: E402,F401
    api_settings,
    app,
    client,
    seeded_book,
)
