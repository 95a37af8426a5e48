"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. Each subclass maps to exactly
one HTTP status; the handlers below turn them into ``{"error": ...}``
bodies through the shared response builder so every exit carries the
CORS headers.

Non-AppError exceptions become generic 500s (with Sentry reporting in
production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.logging import get_logger
from shared.responses import build_response

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

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
        # field/details stay server-side; clients only ever see the message
        return {"error": self.message}


class MissingTokenError(AppError):
    status_code = 400
    error_code = "missing_token"


class InvalidPayloadError(AppError):
    status_code = 400
    error_code = "invalid_payload"


class MalformedRequestError(AppError):
    status_code = 400
    error_code = "malformed_request"


class CaptchaUnavailableError(MalformedRequestError):
    """The verification service could not be reached or answered garbage."""

    error_code = "captcha_unavailable"


class CaptchaRejectedError(AppError):
    status_code = 403
    error_code = "captcha_rejected"

    def __init__(self, message: str, *, error_codes: tuple[str, ...] = ()) -> None:
        super().__init__(message, details=list(error_codes))
        self.error_codes = error_codes


class MethodNotAllowedError(AppError):
    status_code = 405
    error_code = "method_not_allowed"


class StorageError(AppError):
    status_code = 500
    error_code = "storage_failure"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> Response:
        return build_response(exc.status_code, exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        # Router-level 404/405 (e.g. TRACE on the survey path)
        return build_response(exc.status_code, {"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return build_response(500, {"error": "An internal server error occurred."})
