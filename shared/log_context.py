"""
Request logging middleware and context management.

Provides:
- Request ID generation for correlation
- Request/response logging with timing
- Context bound into structlog contextvars for the whole request
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import Response

from shared.generators import generate_request_id
from shared.logging import get_logger

log = get_logger("survey.request")


def log_request_end(status_code: int, duration_ms: int) -> None:
    """Log the end of a request with timing and status."""
    if status_code >= 500:
        log_fn = log.error
    elif status_code >= 400:
        log_fn = log.warning
    else:
        log_fn = log.info

    log_fn("request_completed", status_code=status_code, duration_ms=duration_ms)


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Register logging middleware with the FastAPI app.

    Every log line emitted while the request is in flight carries
    request_id, method and path. The request ID is echoed back in the
    ``X-Request-ID`` response header.
    """

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        request_id = generate_request_id()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
            duration_ms = int((time.perf_counter() - started) * 1000)
            log_request_end(response.status_code, duration_ms)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()
