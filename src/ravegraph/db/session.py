from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ravegraph.config import Settings, get_settings
from ravegraph.core.errors import DatabaseError
from ravegraph.db.models import Base

logger = structlog.get_logger()


def _is_connectivity_failure(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Handle to the store: one pooled async engine, sessions on demand.

    Built once by the composition root and passed to every repository. Each
    repository call opens its own session, so concurrent calls never share one.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> Database:
        engine = create_async_engine(url, future=True, **engine_kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return cls(engine)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Database:
        """Create the engine with connection pooling from settings."""

        cfg = settings or get_settings()
        engine_kwargs: dict[str, Any] = {"echo": cfg.debug, "pool_pre_ping": True}
        if not cfg.database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=cfg.db_pool_size,
                max_overflow=cfg.db_max_overflow,
                pool_timeout=cfg.db_pool_timeout,
                pool_recycle=cfg.db_pool_recycle,
            )
        return cls.from_url(cfg.database_url, **engine_kwargs)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a read session; store failures surface as DatabaseError."""

        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside one transaction: commit on success, roll back on error."""

        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc

    async def ping(self) -> bool:
        """Return True when the store answers a trivial query."""

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("database_unreachable", error=str(exc))
            return False
        return True

    async def create_schema(self) -> None:
        """Create all tables that do not exist yet (local and test stores)."""

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise self._wrap(exc) from exc
        logger.info("schema_created", dialect=self.dialect_name)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("database_disposed")

    @staticmethod
    def _wrap(exc: SQLAlchemyError) -> DatabaseError:
        connectivity = _is_connectivity_failure(exc)
        logger.error(
            "database_error",
            error_type=type(exc).__name__,
            connectivity=connectivity,
            error=str(exc),
        )
        message = str(getattr(exc, "orig", None) or exc)
        return DatabaseError(message, cause=exc, is_connectivity=connectivity)
