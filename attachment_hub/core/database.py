"""Database engine, session factory and request-scoped session dependency."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from attachment_hub.core.config import get_settings
from attachment_hub.core.structured_logging import log_json

settings = get_settings()
logger = logging.getLogger(__name__)

_MAX_LOGGED_STATEMENT = 2000


def async_database_url(url: str) -> str:
    """Map plain driver URLs onto their asyncio drivers."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def install_slow_query_logging(target: AsyncEngine, threshold_ms: float) -> None:
    """Log statements that take at least ``threshold_ms`` as ``slow_query``."""
    sync_engine = target.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _before_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ) -> None:
        context._query_start_time = time.perf_counter()

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _after_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ) -> None:
        start = getattr(context, "_query_start_time", None)
        if start is None:
            return

        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms < threshold_ms:
            return

        stmt = str(statement)
        if len(stmt) > _MAX_LOGGED_STATEMENT:
            stmt = stmt[: _MAX_LOGGED_STATEMENT - 3] + "..."

        log_json(
            logger,
            logging.WARNING,
            "slow_query",
            duration_ms=round(duration_ms, 2),
            statement=stmt,
        )


# NullPool keeps connections from leaking across event loops in test runs
engine = create_async_engine(
    async_database_url(settings.database_url),
    echo=False,
    poolclass=NullPool if "test" in settings.database_url else None,
)

if settings.slow_query_ms > 0:
    install_slow_query_logging(engine, settings.slow_query_ms)


# Loaded attributes stay readable after commit so responses can be built from them
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    Whatever the handler left uncommitted is committed when it returns and
    rolled back if it raised.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
