"""
Health check endpoint.

GET /health checks the key-value store.
Rules:
- Redis not answering → "unhealthy" (503), submissions cannot be saved.
- In-memory fallback → "degraded" (200), works, but nothing survives a restart.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from dependencies import get_kv_store
from infrastructure.kv.memory_store import InMemoryKVStore
from shared.responses import build_response

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(kv=Depends(get_kv_store)) -> Response:
    checks: dict[str, str] = {}
    overall = "healthy"

    if isinstance(kv, InMemoryKVStore):
        checks["kv"] = "in_memory"
        overall = "degraded"
    else:
        try:
            await kv.ping()
            checks["kv"] = "ok"
        except Exception:
            checks["kv"] = "error"
            overall = "unhealthy"

    status_code = 503 if overall == "unhealthy" else 200
    return build_response(status_code, {"status": overall, "checks": checks})
