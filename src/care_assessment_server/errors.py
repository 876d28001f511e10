"""Global exception handlers — map ``ValueError`` / ``KeyError`` to HTTP codes.

Routes raise ``ValueError("Assessment not found")`` and similar instead of
building error responses; the handlers here pick the status code from the
message and send the client a generic description.  The raw message, which
may contain member identifiers, stays in the server log.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("not found", 404),
]

_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """``ValueError`` → 404 by message keyword, else 400."""
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    return JSONResponse(status_code=status, content={"detail": _SAFE_MESSAGES.get(status, "Invalid request")})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
