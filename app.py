"""
Application factory for the URL redirector.

create_app() wires settings, logging, the MongoDB lifespan, rate limiting,
middleware and routers. Tests pass their own AppSettings.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient
from pymongo.errors import PyMongoError

from config import AppSettings
from errors import register_error_handlers
from infrastructure.qr.qrcode_renderer import QrCodeRenderer
from infrastructure.rate_limiter import build_limiter
from middleware.request_logging import RequestLoggingMiddleware
from repositories.indexes import ensure_indexes
from routes.health_routes import router as health_router
from routes.qr_routes import router as qr_router
from routes.redirect_routes import router as redirect_router
from routes.url_routes import router as url_router
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Build the FastAPI app; settings are read from the environment when omitted."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings)

    # Before the app exists so startup failures are reported too
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri,
            tz_aware=True,
            serverSelectionTimeoutMS=settings.db.server_selection_timeout_ms,
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]

        # Redis is optional; without it rate-limit counters stay in memory
        redis_client = None
        if settings.redis.redis_uri:
            redis_client = aioredis.from_url(
                settings.redis.redis_uri,
                encoding="utf-8",
                decode_responses=True,
            )
        app.state.redis = redis_client

        try:
            await ensure_indexes(app.state.db, settings.db.collection_name)
        except PyMongoError as e:
            # Keep serving so /health can report the outage
            log.error("index_bootstrap_failed", error=str(e), error_type=type(e).__name__)

        log.info(
            "app_started",
            env=settings.env,
            base_url=settings.base_url,
            port=settings.port,
            docs=settings.docs_url if settings.swagger_enabled else None,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Shorten URLs, redirect visitors, count clicks and render QR codes.",
        docs_url=settings.docs_url if settings.swagger_enabled else None,
        openapi_url="/openapi.json" if settings.swagger_enabled else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.qr_renderer = QrCodeRenderer()

    # Read by the /api routers through enforce_api_rate_limit
    app.state.limiter = build_limiter(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(url_router)
    app.include_router(qr_router)
    # Catch-all /{short_code}; keep last
    app.include_router(redirect_router)

    return app
