"""
URL API endpoints under /api.

POST   /api/shorten             : get-or-create a short link
GET    /api/info/{short_code}   : per-link statistics (no click counted)
GET    /api/stats               : totals and the 10 newest links
GET    /api/urls                : paginated listing (non-production only)
GET    /api/urls/{short_code}   : full mapping record
DELETE /api/urls/{short_code}   : remove a mapping
GET    /api                     : API information
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from config import AppSettings
from dependencies import get_redirect_service, get_settings, get_shorten_service
from errors import NotFoundError, ValidationError
from infrastructure.rate_limiter import enforce_api_rate_limit
from schemas.dto.requests.url import ListUrlsQuery, ShortCodePath, ShortenRequest
from schemas.dto.responses.common import ApiInfoResponse, ErrorResponse
from schemas.dto.responses.url import (
    DeleteUrlResponse,
    OverallStatsData,
    OverallStatsResponse,
    Pagination,
    ShortenData,
    ShortenResponse,
    UrlDetailResponse,
    UrlListResponse,
    UrlMappingItem,
    UrlStatsData,
    UrlStatsResponse,
)
from services.redirect_service import RedirectService
from services.url_service import ShortenService
from shared.validators import validate_url

router = APIRouter(
    prefix="/api",
    tags=["URLs"],
    dependencies=[Depends(enforce_api_rate_limit)],
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

API_ENDPOINTS = {
    "POST /api/shorten": "Create a short URL",
    "GET /:shortCode": "Redirect to original URL",
    "GET /api/info/:shortCode": "Get URL statistics",
    "GET /api/stats": "Get overall statistics",
    "GET /api/qr/:shortCode": "Generate a QR code for a short URL",
    "GET /api/health": "Health check",
    "GET /api/urls": "List all URLs (development only)",
    "GET /api/urls/:shortCode": "Get URL details",
    "DELETE /api/urls/:shortCode": "Delete a URL",
}


@router.get("", response_model=ApiInfoResponse)
async def api_info(settings: AppSettings = Depends(get_settings)) -> ApiInfoResponse:
    return ApiInfoResponse(
        name=settings.app_name,
        version=settings.app_version,
        description="A simple URL shortener service",
        endpoints=API_ENDPOINTS,
        docs=settings.docs_url if settings.swagger_enabled else None,
    )


@router.post("/shorten", response_model=ShortenResponse)
async def shorten_url(
    body: ShortenRequest,
    service: ShortenService = Depends(get_shorten_service),
    settings: AppSettings = Depends(get_settings),
) -> ShortenResponse:
    """
    Shorten a long URL.

    Returns the existing short link when the URL was shortened before
    (``isNew: false``), otherwise creates one (``isNew: true``). Both cases
    answer 200.

    - **url** (string, required): http or https URL, at most 2048 characters.
      URLs pointing at this service are refused.
    """
    if not validate_url(body.url, blocked_self_domains=(settings.base_host,)):
        raise ValidationError(
            "Please provide a valid URL with http or https protocol", field="url"
        )

    result = await service.shorten(body.url)
    return ShortenResponse(
        message="URL shortened successfully" if result.is_new else "URL already exists",
        data=ShortenData(
            shortUrl=result.short_url,
            originalUrl=result.original_url,
            shortCode=result.short_code,
            qrCodeUrl=result.qr_code_url,
            isNew=result.is_new,
        ),
    )


@router.get(
    "/info/{short_code}",
    response_model=UrlStatsResponse,
    responses={404: {"model": ErrorResponse, "description": "Short URL not found"}},
)
async def get_url_stats(
    short_code: ShortCodePath,
    service: RedirectService = Depends(get_redirect_service),
) -> UrlStatsResponse:
    mapping = await service.get_stats(short_code)
    if mapping is None:
        raise NotFoundError("Short URL not found", field="shortCode")
    return UrlStatsResponse(
        data=UrlStatsData(
            originalUrl=mapping.original_url,
            shortCode=mapping.short_code,
            clickCount=mapping.click_count,
            createdAt=mapping.created_at,
            updatedAt=mapping.updated_at,
        )
    )


@router.get("/stats", response_model=OverallStatsResponse)
async def get_overall_stats(
    service: RedirectService = Depends(get_redirect_service),
) -> OverallStatsResponse:
    stats = await service.get_overall_stats()
    return OverallStatsResponse(
        data=OverallStatsData(
            totalUrls=stats.total_urls,
            recentUrls=[UrlMappingItem.from_doc(doc) for doc in stats.recent_urls],
        )
    )


@router.get(
    "/urls",
    response_model=UrlListResponse,
    responses={404: {"model": ErrorResponse, "description": "Disabled in production"}},
)
async def list_urls(
    query: Annotated[ListUrlsQuery, Query()],
    service: RedirectService = Depends(get_redirect_service),
    settings: AppSettings = Depends(get_settings),
) -> UrlListResponse:
    """List all URLs, newest first. Only available outside production."""
    if settings.is_production:
        raise NotFoundError("Route not found")

    page = await service.list_urls(limit=query.limit, offset=query.offset)
    return UrlListResponse(
        data=[UrlMappingItem.from_doc(doc) for doc in page.items],
        pagination=Pagination(
            total=page.total,
            limit=page.limit,
            offset=page.offset,
            hasMore=page.has_more,
        ),
    )


@router.get(
    "/urls/{short_code}",
    response_model=UrlDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "Short URL not found"}},
)
async def get_url_details(
    short_code: ShortCodePath,
    service: RedirectService = Depends(get_redirect_service),
) -> UrlDetailResponse:
    mapping = await service.get_stats(short_code)
    if mapping is None:
        raise NotFoundError(
            f"The short code '{short_code}' does not exist", field="shortCode"
        )
    return UrlDetailResponse(data=UrlMappingItem.from_doc(mapping))


@router.delete(
    "/urls/{short_code}",
    response_model=DeleteUrlResponse,
    responses={404: {"model": ErrorResponse, "description": "Short URL not found"}},
)
async def delete_url(
    short_code: ShortCodePath,
    service: RedirectService = Depends(get_redirect_service),
) -> DeleteUrlResponse:
    removed = await service.pop(short_code)
    if removed is None:
        raise NotFoundError(
            f"The short code '{short_code}' does not exist", field="shortCode"
        )
    return DeleteUrlResponse(deletedUrl=UrlMappingItem.from_doc(removed))
