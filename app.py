"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI

from config import AppSettings
from errors import register_error_handlers
from infrastructure.captcha.turnstile import TurnstileProvider
from infrastructure.http_client import HttpClient
from infrastructure.kv.memory_store import InMemoryKVStore
from infrastructure.kv.redis_client import create_redis_client
from infrastructure.kv.redis_store import RedisKVStore
from routes.health_routes import router as health_router
from routes.survey_routes import create_survey_router
from services.submission_store import SubmissionStore
from services.survey_service import SurveyService
from shared.log_context import setup_logging_middleware
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        app.state.settings = settings

        http_client = HttpClient(timeout=settings.turnstile.turnstile_timeout_seconds)
        captcha = TurnstileProvider(
            secret=settings.turnstile.turnstile_secret_key,
            http_client=http_client,
            verify_url=settings.turnstile.turnstile_verify_url,
        )

        # In-memory only when no Redis is configured at all
        kv_store: RedisKVStore | InMemoryKVStore
        if settings.kv.redis_uri:
            redis_client = await create_redis_client(settings.kv.redis_uri)
            kv_store = RedisKVStore(
                redis_client,
                key_prefix=settings.kv.kv_key_prefix,
                ttl_seconds=settings.kv.kv_ttl_seconds,
            )
        else:
            log.warning("kv_store_in_memory")
            kv_store = InMemoryKVStore()

        app.state.kv_store = kv_store
        app.state.survey_service = SurveyService(captcha, SubmissionStore(kv_store))

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()
        if isinstance(kv_store, RedisKVStore):
            await kv_store.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # CORS headers come from shared.responses.build_response, not middleware
    setup_logging_middleware(app)
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(create_survey_router(settings.survey_path))

    return app
