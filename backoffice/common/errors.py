from __future__ import annotations

from fastapi import HTTPException


class BackofficeError(Exception):
    """
    Base of every error raised by the back-office core.

    The API layer maps each subclass onto one HTTP status; nothing here is
    fatal to the process.
    """


class ValidationError(BackofficeError, ValueError):
    """Missing or malformed caller input, detected before any mutation."""


class NotFound(BackofficeError, LookupError):
    """Lookup by identifier found no matching row."""


class PersistenceError(BackofficeError):
    """
    Database failure: constraint violation, connection loss, pool exhaustion.

    Raised only after the surrounding transaction has been rolled back.
    """


class GatewayError(BackofficeError):
    """Payment gateway unreachable or answered with an unexpected response."""


# ============================================================
# HTTP mapping (API layer only)
# ============================================================

_HTTP_STATUS = (
    (ValidationError, 400),
    (NotFound, 404),
    (GatewayError, 502),
    (PersistenceError, 500),
)


def http_error(e: BackofficeError) -> HTTPException:
    """
    BackofficeError -> fastapi.HTTPException.

    ValidationError 400 / NotFound 404 / GatewayError 502 / PersistenceError 500
    """
    for cls, status_code in _HTTP_STATUS:
        if isinstance(e, cls):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
