"""FastAPI dependency injection — provides DB sessions, the service and user identity.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on error,
matching the SDK convention where service and repositories call ``flush()``
but never ``commit()``.
"""

import hmac
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from canova_db.engine import get_session_factory
from canova_flow.service import FormService


# ------------------------------------------------------------------
# Database session — transaction boundary lives here
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ------------------------------------------------------------------
# Service — stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_service(request: Request) -> FormService:
    """Return the FormService singleton from ``app.state``."""
    return request.app.state.service


# ------------------------------------------------------------------
# User identity — extracted from the X-User-ID header
# ------------------------------------------------------------------

def _check_proxy_secret(request: Request, x_proxy_secret: str | None) -> None:
    """Reject the request unless it carries the configured proxy secret.

    A matching ``X-Proxy-Secret`` proves the ``X-User-ID`` was injected by
    the trusted gateway and not forged by an external client.
    """
    expected_secret: str | None = request.app.state.settings.trusted_proxy_secret
    if not expected_secret:
        return
    if not x_proxy_secret:
        raise HTTPException(status_code=403, detail="X-Proxy-Secret header is required")
    # Constant-time comparison
    if not hmac.compare_digest(x_proxy_secret, expected_secret):
        raise HTTPException(status_code=403, detail="Invalid proxy secret")


async def get_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str:
    """Extract the author's identity; 401 if the header is missing."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header is required")
    _check_proxy_secret(request, x_proxy_secret)
    return x_user_id


async def get_optional_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str | None:
    """Identity of a form filler, or ``None`` for anonymous fillers."""
    if not x_user_id:
        return None
    _check_proxy_secret(request, x_proxy_secret)
    return x_user_id
