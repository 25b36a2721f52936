"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

from canova_db.config import DatabaseSettings, load_database_settings

# Re-exported so FastAPI Query() defaults can reference them
# (Query defaults must be static at decoration time).
from canova_flow.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT  # noqa: F401


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS — comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Base URL of the web app; published links point below it
    frontend_url: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    # Trusted proxy secret — when set, every request that carries
    # X-User-ID must also carry X-Proxy-Secret matching this value.
    trusted_proxy_secret: str | None = None

    # Connection and pool settings of the form store
    database: DatabaseSettings = field(default_factory=DatabaseSettings)


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*``, ``PG_*`` and related environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173"),
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        trusted_proxy_secret=os.getenv("TRUSTED_PROXY_SECRET") or None,
        database=load_database_settings(),
    )
