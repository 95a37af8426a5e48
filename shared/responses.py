"""
Response builder: the only way this service constructs an HTTP response.

Every response, whatever its status, carries the same cross-origin headers
so browsers on any site can post the survey form.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse, Response

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def build_response(status_code: int, body: Optional[Any] = None) -> Response:
    """Build a response with the fixed CORS headers attached.

    Args:
        status_code: HTTP status to send.
        body: JSON-serialisable body, or ``None`` for an empty response
            (used by the 204 preflight answer).

    Returns:
        A ``JSONResponse`` (``Content-Type: application/json``) when a body is
        given, otherwise a bare ``Response`` with no content.
    """
    if body is None:
        return Response(status_code=status_code, headers=dict(CORS_HEADERS))
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers=dict(CORS_HEADERS),
    )
