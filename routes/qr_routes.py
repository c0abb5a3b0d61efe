"""
QR code endpoint.

GET /api/qr/{short_code}?format=png|base64&size=100..1000
"""

from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from dependencies import get_qr_service
from infrastructure.rate_limiter import enforce_api_rate_limit
from schemas.dto.requests.url import QrFormat, ShortCodePath
from schemas.dto.responses.common import ErrorResponse
from schemas.dto.responses.url import QrCodeData, QrCodeResponse
from services.qr_service import DEFAULT_QR_SIZE, QrService

router = APIRouter(
    prefix="/api",
    tags=["QR Code"],
    dependencies=[Depends(enforce_api_rate_limit)],
)


@router.get(
    "/qr/{short_code}",
    response_model=None,
    responses={
        200: {
            "model": QrCodeResponse,
            "description": "PNG image, or JSON with a data URI when format=base64",
            "content": {"image/png": {"schema": {"type": "string", "format": "binary"}}},
        },
        400: {"model": ErrorResponse, "description": "Invalid parameters"},
        404: {"model": ErrorResponse, "description": "Short code not found"},
        500: {"model": ErrorResponse, "description": "QR rendering failed"},
    },
)
async def generate_qr_code(
    short_code: ShortCodePath,
    format: QrFormat = Query(default="png", description="Output format"),
    size: int = Query(default=DEFAULT_QR_SIZE, ge=100, le=1000, description="Pixels"),
    service: QrService = Depends(get_qr_service),
) -> Union[Response, QrCodeResponse]:
    rendered = await service.render(short_code, format=format, size=size)

    if format == "base64":
        return QrCodeResponse(
            data=QrCodeData(
                shortCode=short_code,
                format="base64",
                qrCode=rendered,
                size=size,
            )
        )

    return Response(
        content=rendered,
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=3600"},
    )
