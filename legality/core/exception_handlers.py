"""Exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Domain failures carry an
error_code that picks the HTTP status; store rejections are refined by the
PostgREST / Postgres code they carry so constraint violations read as 409
and row-level-security denials as 403.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from legality.core.config import get_settings
from legality.domain.exceptions import LegalityException, StoreRequestException

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "PROFILE_NOT_FOUND": 404,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "VALIDATION_ERROR": 400,
    "STORE_REQUEST_ERROR": 400,
    "STORE_UNAVAILABLE": 503,
}

# Store codes: unique_violation, foreign_key_violation, insufficient_privilege
# (row-level security) and PostgREST "no rows for .single()".
_STORE_CODE_STATUS: dict[str, int] = {
    "23505": 409,
    "23503": 409,
    "42501": 403,
    "PGRST116": 404,
}


def status_for(error_code: str | None) -> int:
    """HTTP status for a domain error code (400 when unmapped)."""
    return _ERROR_CODE_STATUS.get(error_code or "", 400)


def _status_for_exception(exc: LegalityException) -> int:
    if isinstance(exc, StoreRequestException) and exc.code in _STORE_CODE_STATUS:
        return _STORE_CODE_STATUS[exc.code]
    return status_for(exc.error_code)


def _legality_exception_handler(request: Request, exc: LegalityException) -> JSONResponse:
    status = _status_for_exception(exc)
    if status >= 500:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, status, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with the field errors."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; the exception text is only exposed in debug mode."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register every handler on app; call once after creating it."""
    app.add_exception_handler(LegalityException, _legality_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
