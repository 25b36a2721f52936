"""Database settings for the form store.

:class:`DatabaseSettings` is read once from the environment by
:func:`load_database_settings` and handed to the engine
(``canova_db.engine.configure_engine``) and to Alembic.

Connection target, first match wins:

1. ``DATABASE_URL`` (either ``postgresql://`` or ``postgresql+asyncpg://``).
2. ``PG_HOST`` / ``PG_PORT`` / ``PG_USER`` / ``PG_PASSWORD`` / ``PG_DATABASE``.

Pool and session tuning:

==========================  ========  =====================================
variable                    default   meaning
==========================  ========  =====================================
``PG_POOL_SIZE``            5         pooled connections per process
``PG_MAX_OVERFLOW``         10        extra connections under burst
``PG_POOL_RECYCLE``         1800      seconds before a connection is renewed
``PG_STATEMENT_TIMEOUT_MS`` 15000     server-side cap per statement (0 = off)
``PG_ECHO``                 false     log every SQL statement
==========================  ========  =====================================

Form pages are whole JSONB documents rewritten on every save, so a slow
statement means a stuck editor request; the statement timeout bounds it.
"""

import os
from dataclasses import dataclass

_ASYNC_PREFIX = "postgresql+asyncpg://"
_SYNC_PREFIX = "postgresql://"


@dataclass(frozen=True)
class DatabaseSettings:
    """Immutable connection and pool configuration."""

    host: str = "localhost"
    port: int = 5432
    user: str = "canova"
    password: str = "canova"
    database: str = "canova"
    # Full URL; when set it replaces the individual parts above
    url: str | None = None

    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle_seconds: int = 1800
    statement_timeout_ms: int = 15000
    echo: bool = False
    application_name: str = "canova"

    def _base_url(self) -> str:
        if self.url:
            return self.url
        return f"{_SYNC_PREFIX}{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """psycopg2 URL, used by Alembic."""
        return self._base_url().replace(_ASYNC_PREFIX, _SYNC_PREFIX, 1)

    @property
    def async_url(self) -> str:
        """asyncpg URL, used by the runtime engine."""
        base = self._base_url()
        if base.startswith(_SYNC_PREFIX):
            return base.replace(_SYNC_PREFIX, _ASYNC_PREFIX, 1)
        return base

    def engine_options(self) -> dict:
        """Keyword arguments for ``create_async_engine``."""
        server_settings = {"application_name": self.application_name}
        if self.statement_timeout_ms > 0:
            server_settings["statement_timeout"] = str(self.statement_timeout_ms)
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_recycle": self.pool_recycle_seconds,
            "pool_pre_ping": True,
            "connect_args": {"server_settings": server_settings},
        }


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_database_settings() -> DatabaseSettings:
    """Build :class:`DatabaseSettings` from ``DATABASE_URL`` and ``PG_*`` variables."""
    return DatabaseSettings(
        host=os.getenv("PG_HOST", "localhost"),
        port=int(os.getenv("PG_PORT", "5432")),
        user=os.getenv("PG_USER", "canova"),
        password=os.getenv("PG_PASSWORD", "canova"),
        database=os.getenv("PG_DATABASE", "canova"),
        url=os.getenv("DATABASE_URL") or None,
        pool_size=int(os.getenv("PG_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("PG_MAX_OVERFLOW", "10")),
        pool_recycle_seconds=int(os.getenv("PG_POOL_RECYCLE", "1800")),
        statement_timeout_ms=int(os.getenv("PG_STATEMENT_TIMEOUT_MS", "15000")),
        echo=_env_bool("PG_ECHO", False),
    )
