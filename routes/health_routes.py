"""
Health check endpoints.

GET /health     : MongoDB + Redis checks, uptime and link count.
GET /api/health : MongoDB ping only; counts against the /api rate limit.

A MongoDB failure answers 500; a missing or failing Redis is reported as
"degraded" with 200 since it only backs rate limiting.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dependencies import get_health_service
from infrastructure.rate_limiter import enforce_api_rate_limit
from schemas.dto.responses.common import ApiHealthResponse, HealthResponse
from services.health_service import HealthService

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={500: {"model": HealthResponse, "description": "MongoDB unreachable"}},
)
async def health_check(
    service: HealthService = Depends(get_health_service),
) -> JSONResponse:
    result = await service.check()
    status_code = 500 if result["status"] == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=result)


@router.get(
    "/api/health",
    response_model=ApiHealthResponse,
    dependencies=[Depends(enforce_api_rate_limit)],
    responses={500: {"model": ApiHealthResponse, "description": "MongoDB unreachable"}},
)
async def api_health_check(
    service: HealthService = Depends(get_health_service),
) -> JSONResponse:
    ok = await service.ping()
    return JSONResponse(
        status_code=200 if ok else 500,
        content={
            "status": "ok" if ok else "error",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if ok else "disconnected",
        },
    )
