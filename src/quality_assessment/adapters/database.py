"""Async database engine and session lifecycle.

``init_database`` is called once from the application lifespan; routes get a
session per request through the ``get_db_session`` dependency, which commits
on success and rolls back on any error.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from quality_assessment.errors import ConfigurationError
from quality_assessment.observability import get_logger
from quality_assessment.settings import Settings

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_database(settings: Settings) -> AsyncEngine:
    """Create the engine and session factory from settings.

    Args:
        settings: Service settings carrying the database URL.

    Returns:
        The created AsyncEngine.
    """
    global _engine, _session_factory

    _engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)

    host = settings.database_url.rsplit("@", 1)[-1]
    logger.info("Database initialised", host=host)
    return _engine


async def close_database() -> None:
    """Dispose of the engine, if one was created."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connections closed")
    _engine = None
    _session_factory = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Raises:
        ConfigurationError: If init_database has not been called.
    """
    if _session_factory is None:
        raise ConfigurationError("Database is not initialised; call init_database first.")

    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Database session rolled back")
            raise
