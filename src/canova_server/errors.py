"""Global exception handlers — map SDK exceptions to HTTP status codes.

The service raises ``ValueError`` for missing rows and invalid states and
``PermissionError`` for owner checks.  Rather than catching these in every
route, global handlers inspect the exception and pick the status code.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("not found", 404),
    ("already exists", 409),
    # Draft or private form opened through the public endpoints
    ("not publicly accessible", 403),
    ("not published", 403),
]


# --- Client-safe messages keyed by HTTP status code ---
# Internal details (user ids, form ids) stay in the server log.
_SAFE_MESSAGES: dict[int, str] = {
    403: "Access denied",
    404: "Resource not found",
    409: "Resource already exists",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map SDK ``ValueError`` to 404, 409, 403 or (by default) 400.

    The raw exception message is logged server-side but never sent to the
    client.
    """
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def permission_error_handler(request: Request, exc: PermissionError) -> JSONResponse:
    """Map owner-check failures to 403."""
    logger.warning("PermissionError at %s: %s", request.url, exc)
    return JSONResponse(status_code=403, content={"detail": _SAFE_MESSAGES[403]})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
