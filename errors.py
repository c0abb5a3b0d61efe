"""
Typed errors of the URL redirector and the handlers that render them.

Every error a route or service raises on purpose is an AppError; its class
fixes the HTTP status and the machine-readable ``code`` of the JSON body.

Request validation errors from FastAPI are reported as 400s with the same
body shape, and so are Starlette's own 404 and 405 answers for unknown routes
and methods. Non-AppError exceptions bubble up as 500s (with Sentry reporting
when configured).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base error; subclasses override ``status_code`` and ``error_code``."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {
            "success": False,
            "message": self.message,
            "code": self.error_code,
        }
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class InvalidArgumentError(ValidationError, ValueError):
    """Raised by pure helpers (e.g. the code generator) for out-of-range input."""

    error_code = "invalid_argument"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class MethodNotAllowedError(AppError):
    status_code = 405
    error_code = "method_not_allowed"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class DuplicateKeyError(ConflictError):
    """A write hit a unique index. ``field`` names the indexed key."""

    error_code = "duplicate_key"


class RateLimitError(AppError):
    status_code = 429
    error_code = "rate_limit_exceeded"


class CodeSpaceExhaustedError(AppError):
    error_code = "code_space_exhausted"


class RepositoryError(AppError):
    error_code = "repository_error"


class RenderError(AppError):
    error_code = "render_error"


def _expose_details(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is not None and settings.is_development


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        payload = exc.to_dict()
        if exc.status_code >= 500:
            log.error(
                "app_error",
                error_code=exc.error_code,
                error=exc.message,
                details=str(exc.details) if exc.details is not None else None,
                path=request.url.path,
            )
            if not _expose_details(request):
                payload.pop("details", None)
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404:
            error: AppError = NotFoundError("Route not found")
        elif exc.status_code == 405:
            error = MethodNotAllowedError("Method not allowed")
        else:
            error = AppError(str(exc.detail))
            error.status_code = exc.status_code
            error.error_code = "http_error"
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_dict(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        error = ValidationError("Validation failed", details=errors)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # sentry_sdk (when initialised) has already captured the exception
        log.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            exc_info=exc,
        )
        payload = {
            "success": False,
            "message": "An internal server error occurred.",
            "code": "internal_error",
        }
        if _expose_details(request):
            payload["details"] = str(exc)
        return JSONResponse(status_code=500, content=payload)
