"""
Database connection and session management.

A Database owns one sync and one async engine for a single URL. It is
constructed explicitly and passed to the components that need it.
"""

from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, AsyncGenerator, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


DEFAULT_DATABASE_URL = "sqlite:///data/tendersync.db"


# =============================================================================
# SQLite Configuration
# =============================================================================


def _configure_sqlite(engine: Engine) -> None:
    """Configure SQLite for better performance and reliability.

    Enables:
    - WAL mode so the scheduler and CLI can read while a sync writes
    - Synchronous mode for durability
    """
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()


def _get_async_url(url: str) -> str:
    """Convert sync database URL to async variant.

    SQLite: sqlite:/// -> sqlite+aiosqlite:///
    PostgreSQL: postgresql:// -> postgresql+asyncpg://
    """
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///")
    elif url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://")
    elif url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://")
    return url


def _ensure_sqlite_dir(url: str) -> None:
    if url.startswith("sqlite:///") and ":memory:" not in url:
        db_path = url.replace("sqlite:///", "")
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)


# =============================================================================
# Database
# =============================================================================


class Database:
    """Engines and session factories for one database URL.

    Engines are created on first use. Call ``dispose``/``dispose_async``
    on shutdown.
    """

    def __init__(
        self,
        url: str = DEFAULT_DATABASE_URL,
        echo: bool = False,
        pool_size: int = 5,
    ):
        self.url = url
        self.echo = echo
        self.pool_size = pool_size

        self._sync_engine: Engine | None = None
        self._async_engine: "AsyncEngine | None" = None
        self._sync_session_factory: sessionmaker[Session] | None = None
        self._async_session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_config(cls, config) -> "Database":
        """Build from a DatabaseConfig."""
        return cls(url=config.url, echo=config.echo, pool_size=config.pool_size)

    # -------------------------------------------------------------------------
    # Engines
    # -------------------------------------------------------------------------

    @property
    def engine(self) -> Engine:
        """Synchronous engine, created on first access."""
        if self._sync_engine is not None:
            return self._sync_engine

        _ensure_sqlite_dir(self.url)

        if self.url.startswith("sqlite"):
            self._sync_engine = create_engine(
                self.url,
                echo=self.echo,
                connect_args={"check_same_thread": False},
            )
            _configure_sqlite(self._sync_engine)
        else:
            self._sync_engine = create_engine(
                self.url,
                echo=self.echo,
                pool_size=self.pool_size,
                max_overflow=10,
                pool_pre_ping=True,
            )

        self._sync_session_factory = sessionmaker(
            bind=self._sync_engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        return self._sync_engine

    @property
    def async_engine(self) -> "AsyncEngine":
        """Asynchronous engine, created on first access."""
        if self._async_engine is not None:
            return self._async_engine

        async_url = _get_async_url(self.url)
        _ensure_sqlite_dir(self.url)

        if async_url.startswith("sqlite"):
            self._async_engine = create_async_engine(async_url, echo=self.echo)
        else:
            self._async_engine = create_async_engine(
                async_url,
                echo=self.echo,
                pool_size=self.pool_size,
                max_overflow=10,
                pool_pre_ping=True,
            )

        self._async_session_factory = async_sessionmaker(
            bind=self._async_engine,
            class_=AsyncSession,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        return self._async_engine

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Synchronous session committed on success, rolled back on error.

        Usage:
            with database.session() as session:
                session.execute(...)
        """
        if self._sync_session_factory is None:
            self.engine

        assert self._sync_session_factory is not None
        session = self._sync_session_factory()

        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @asynccontextmanager
    async def async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Asynchronous session committed on success, rolled back on error.

        Usage:
            async with database.async_session() as session:
                await session.execute(...)
        """
        if self._async_session_factory is None:
            self.async_engine

        assert self._async_session_factory is not None
        session = self._async_session_factory()

        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def init_db(self) -> None:
        """Create all tables that don't exist yet."""
        Base.metadata.create_all(bind=self.engine)

    async def init_db_async(self) -> None:
        """Create all tables that don't exist yet, asynchronously."""
        async with self.async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def drop_db(self) -> None:
        """Drop all tables.

        WARNING: This will delete all data!
        """
        Base.metadata.drop_all(bind=self.engine)

    # -------------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------------

    def dispose(self) -> None:
        """Dispose of the synchronous engine."""
        if self._sync_engine is not None:
            self._sync_engine.dispose()
            self._sync_engine = None
            self._sync_session_factory = None

    async def dispose_async(self) -> None:
        """Dispose of both engines."""
        self.dispose()

        if self._async_engine is not None:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None
