"""
Root endpoints: service information and the short-link redirect.

The router must be included last; ``/{short_code}`` matches any single path
segment.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from config import AppSettings
from dependencies import get_redirect_service, get_settings
from errors import NotFoundError
from schemas.dto.requests.url import ShortCodePath
from schemas.dto.responses.common import ErrorResponse
from services.redirect_service import RedirectService

router = APIRouter()


@router.get("/", tags=["Health"])
async def service_info(settings: AppSettings = Depends(get_settings)) -> dict:
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "description": "A simple and powerful URL shortening service",
        "endpoints": {
            "health": "/health",
            "api": "/api",
            "docs": settings.docs_url if settings.swagger_enabled else None,
        },
    }


@router.get(
    "/{short_code}",
    tags=["Redirect"],
    status_code=302,
    response_class=RedirectResponse,
    responses={
        302: {"description": "Redirect to the original URL"},
        400: {"model": ErrorResponse, "description": "Invalid short code format"},
        404: {"model": ErrorResponse, "description": "Short URL not found"},
    },
)
async def redirect_to_original(
    short_code: ShortCodePath,
    service: RedirectService = Depends(get_redirect_service),
) -> RedirectResponse:
    """Redirect to the original URL and count the click."""
    original_url = await service.resolve(short_code)
    if original_url is None:
        raise NotFoundError("Short URL not found", field="shortCode")
    return RedirectResponse(url=original_url, status_code=302)
