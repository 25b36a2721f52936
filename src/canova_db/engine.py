"""Process-wide async engine and session factory.

The server calls :func:`configure_engine` with its :class:`DatabaseSettings`
at startup; anything else (scripts, a bare ``get_db``) falls back to
:func:`load_database_settings`.  The engine itself is built on first use
and torn down by :func:`dispose_engine`.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from canova_db.config import DatabaseSettings, load_database_settings

logger = logging.getLogger(__name__)

_settings: DatabaseSettings | None = None
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def configure_engine(settings: DatabaseSettings) -> None:
    """Use *settings* for the engine built on next access.

    Raises:
        RuntimeError: if an engine already exists; dispose it first.
    """
    global _settings
    if _engine is not None:
        raise RuntimeError("Engine already created; call dispose_engine() first")
    _settings = settings


def get_settings() -> DatabaseSettings:
    global _settings
    if _settings is None:
        _settings = load_database_settings()
    return _settings


def get_engine() -> AsyncEngine:
    """Return (and lazily create) the shared async engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.async_url, **settings.engine_options())
        logger.info(
            "Database engine created (pool=%d+%d, statement_timeout=%dms)",
            settings.pool_size,
            settings.max_overflow,
            settings.statement_timeout_ms,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return (and lazily create) the async session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Close the pool; the next access builds a fresh engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
