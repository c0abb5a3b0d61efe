"""
Common response DTOs shared across multiple endpoints.

ErrorResponse:     standard error shape from AppError.to_dict()
HealthResponse:    GET /health
ApiHealthResponse: GET /api/health
ApiInfoResponse:   GET / and GET /api
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by the AppError exception handler."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    message: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class DatabaseCheck(BaseModel):
    status: str
    responseTime: Optional[float] = None  # milliseconds
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str
    timestamp: str
    uptime: float
    version: str
    checks: dict[str, str]
    database: DatabaseCheck
    details: dict[str, Any] = {}


class ApiHealthResponse(BaseModel):
    """Response body for GET /api/health."""

    status: str
    timestamp: str
    database: str


class ApiInfoResponse(BaseModel):
    name: str
    version: str
    description: str
    endpoints: dict[str, str]
    docs: Optional[str] = None
