"""
Database handle: one AsyncEngine plus its session factory.

The handle is built explicitly (by the application factory or a test), opened
with `connect()` at startup and released with `dispose()` at shutdown. It lives
on `app.state.database`; nothing in the package keeps a module-level engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from bookstore.database.base import Base

logger = logging.getLogger(__name__)


def safe_log_db_url(db_url: str) -> str:
    """
    Return the URL without credentials (scheme, host, port and database name only),
    so it can be logged.
    """
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


class Database:
    """
    Long-lived storage handle shared by all requests.

    Args:
        url: SQLAlchemy async URL (e.g. postgresql+psycopg://..., sqlite+aiosqlite:///...)
        echo: forward to create_async_engine (SQL echo; keep off in production)
    """

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> None:
        """Create the engine and session factory. Calling it twice is a no-op."""
        if self._engine is not None:
            return

        self._engine = create_async_engine(
            self.url,
            echo=self.echo,
            pool_pre_ping=True,              # Enables connection health checks
        )
        # expire_on_commit=False: rows returned by a handler stay readable after commit().
        self._sessionmaker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("db.connect", extra={"db_url": safe_log_db_url(self.url)})

    async def create_all(self) -> None:
        """Create the tables registered on Base.metadata (idempotent)."""
        # import to register models with Base.metadata
        from bookstore import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("db.create_all", extra={"tables": sorted(Base.metadata.tables)})

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close every pooled connection. The handle can be connected again afterwards."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("db.dispose")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a fresh AsyncSession and close it afterwards. The caller decides when to commit."""
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected; call connect() first")
        async with self._sessionmaker() as session:
            yield session
