"""
Response DTOs for URL shortening, lookup and QR endpoints.

ShortenResponse:      POST /api/shorten  (200)
UrlStatsResponse:     GET /api/info/{shortCode}  (200)
OverallStatsResponse: GET /api/stats  (200)
UrlDetailResponse:    GET /api/urls/{shortCode}  (200)
UrlListResponse:      GET /api/urls  (200, non-production only)
DeleteUrlResponse:    DELETE /api/urls/{shortCode}  (200)
QrCodeResponse:       GET /api/qr/{shortCode}?format=base64  (200)

Field names are camelCase, matching the JSON contract; the route handlers
build these models explicitly from document models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.url import UrlMappingDoc


class UrlMappingItem(BaseModel):
    """A full mapping record as exposed over HTTP."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    originalUrl: str
    shortCode: str
    clickCount: int
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_doc(cls, doc: UrlMappingDoc) -> "UrlMappingItem":
        return cls(
            id=str(doc.id) if doc.id is not None else None,
            originalUrl=doc.original_url,
            shortCode=doc.short_code,
            clickCount=doc.click_count,
            createdAt=doc.created_at,
            updatedAt=doc.updated_at,
        )


class ShortenData(BaseModel):
    shortUrl: str
    originalUrl: str
    shortCode: str
    qrCodeUrl: str
    isNew: bool


class ShortenResponse(BaseModel):
    success: bool = True
    message: str
    data: ShortenData


class UrlStatsData(BaseModel):
    originalUrl: str
    shortCode: str
    clickCount: int
    createdAt: datetime
    updatedAt: datetime


class UrlStatsResponse(BaseModel):
    success: bool = True
    message: str = "URL statistics retrieved successfully"
    data: UrlStatsData


class OverallStatsData(BaseModel):
    totalUrls: int
    recentUrls: list[UrlMappingItem]


class OverallStatsResponse(BaseModel):
    success: bool = True
    message: str = "Overall statistics retrieved successfully"
    data: OverallStatsData


class UrlDetailResponse(BaseModel):
    success: bool = True
    data: UrlMappingItem


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool


class UrlListResponse(BaseModel):
    success: bool = True
    data: list[UrlMappingItem]
    pagination: Pagination


class DeleteUrlResponse(BaseModel):
    message: str = "URL deleted successfully"
    deletedUrl: UrlMappingItem


class QrCodeData(BaseModel):
    shortCode: str
    format: str
    qrCode: str  # data:image/png;base64,...
    size: int


class QrCodeResponse(BaseModel):
    success: bool = True
    message: str = "QR code generated successfully"
    data: QrCodeData
