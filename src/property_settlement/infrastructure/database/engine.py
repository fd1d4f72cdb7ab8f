"""Async database engine and session factory construction.

Provides:
    - build_engine: creates the SQLAlchemy async engine for a URL.
    - build_session_factory: an async_sessionmaker bound to that engine.
    - init_db / close_db: lifecycle hooks for the app lifespan and the
      simulation script.

The engine is owned by whoever builds it (normally the FastAPI lifespan),
not by this module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from property_settlement.infrastructure.database.orm_models import Base
from property_settlement.logging_config import get_logger

if TYPE_CHECKING:
    from property_settlement.config import Settings

logger = get_logger(__name__)


def build_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
) -> AsyncEngine:
    """Create an async engine; pool sizing is ignored for SQLite URLs."""
    kwargs: dict = {"echo": echo}
    if not database_url.startswith("sqlite"):
        kwargs["pool_pre_ping"] = True
        if pool_size is not None:
            kwargs["pool_size"] = pool_size
        if max_overflow is not None:
            kwargs["max_overflow"] = max_overflow

    engine = create_async_engine(database_url, **kwargs)
    logger.info("database.engine_created", dialect=engine.dialect.name)
    return engine


def build_engine_from_settings(settings: Settings) -> AsyncEngine:
    return build_engine(
        settings.database_url,
        echo=settings.db_echo_sql,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create tables that don't exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database.tables_created")


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("database.engine_disposed")
