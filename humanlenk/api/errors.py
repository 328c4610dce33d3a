"""
Error translation for the HTTP API.

Every failure leaves the service as ``{"success": false, "error": <message>}``,
optionally with ``details`` (validation field list) and, outside production,
a ``stack`` for unexpected 500s.

Categories
----------
- ``AppError``: raised by routers and services with an explicit status
  (400, 401, 403, 404, 409, 429, 503).
- ``RequestValidationError``: malformed bodies or query strings, reported as
  400 ``Validation failed`` with one entry per offending field.
- slowapi ``RateLimitExceeded``: too many requests from one IP, reported as 429
  with the rate-limit headers.
- Starlette ``HTTPException``: unknown routes and wrong methods keep their status.
- SQLAlchemy ``IntegrityError``: duplicate unique values, reported as 409.
- Anything else: logged with method, URL and traceback, reported as 500.
"""

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from humanlenk.api.rate_limit import RATE_LIMIT_MESSAGE

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    A known, client-facing failure.

    Parameters
    ----------
    message : str
        Text sent back as ``error``.
    status_code : int
        HTTP status of the response.
    details : Any, optional
        Extra structured information sent back as ``details``.
    """

    def __init__(self, message: str, status_code: int = 500, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def error_body(message: str, details: Optional[Any] = None) -> dict:
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    return body


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_production)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed with %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body("Validation failed", details))


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    client = request.client.host if request.client else None
    logger.warning("Rate limit exceeded: client=%s %s %s limit=%s", client, request.method, request.url.path, exc.detail)
    response = JSONResponse(status_code=429, content=error_body(RATE_LIMIT_MESSAGE))
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content=error_body(message), headers=getattr(exc, "headers", None))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content=error_body("Resource already exists"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    body = error_body("Internal Server Error")
    if not _is_production(request):
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every translator above to `app`."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
