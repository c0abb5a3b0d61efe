"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Services are built per request around the
database handle that the lifespan hook stored on app.state; nothing here
caches a client of its own.
"""

from __future__ import annotations

from fastapi import Depends, Request

from config import AppSettings
from infrastructure.qr.protocol import QrRenderer
from repositories.url_repository import UrlRepository
from services.health_service import HealthService
from services.qr_service import QrService
from services.redirect_service import RedirectService
from services.url_service import ShortenService


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


async def get_redis(request: Request):
    """Return the async Redis client from app.state (may be None if not configured)."""
    return getattr(request.app.state, "redis", None)


def get_qr_renderer(request: Request) -> QrRenderer:
    return request.app.state.qr_renderer


async def get_url_repository(
    db=Depends(get_db),
    settings: AppSettings = Depends(get_settings),
) -> UrlRepository:
    return UrlRepository(db[settings.db.collection_name])


def get_shorten_service(
    repository: UrlRepository = Depends(get_url_repository),
    settings: AppSettings = Depends(get_settings),
) -> ShortenService:
    return ShortenService(
        repository,
        base_url=settings.base_url,
        code_length=settings.short_code_length,
    )


def get_redirect_service(
    repository: UrlRepository = Depends(get_url_repository),
) -> RedirectService:
    return RedirectService(repository)


def get_qr_service(
    repository: UrlRepository = Depends(get_url_repository),
    renderer: QrRenderer = Depends(get_qr_renderer),
    settings: AppSettings = Depends(get_settings),
) -> QrService:
    return QrService(repository, renderer, base_url=settings.base_url)


async def get_health_service(
    request: Request,
    db=Depends(get_db),
    redis=Depends(get_redis),
    settings: AppSettings = Depends(get_settings),
) -> HealthService:
    return HealthService(
        db,
        redis,
        collection_name=settings.db.collection_name,
        started_at=getattr(request.app.state, "started_at", None),
        version=settings.app_version,
    )
