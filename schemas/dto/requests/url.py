"""
Request DTOs for URL shortening and lookup endpoints.
"""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import Path
from pydantic import BaseModel, Field, field_validator

from shared.validators import (
    MAX_URL_LENGTH,
    SHORT_CODE_MAX_LENGTH,
    SHORT_CODE_MIN_LENGTH,
    SHORT_CODE_PATTERN,
)

QrFormat = Literal["png", "base64"]


class ShortenRequest(BaseModel):
    """Request body for POST /api/shorten.

    Full URL validation (scheme, format, self-reference) happens in the route,
    where the settings are known.
    """

    url: str = Field(min_length=1, max_length=MAX_URL_LENGTH)

    @field_validator("url", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class ListUrlsQuery(BaseModel):
    """Pagination for the development-only GET /api/urls listing."""

    limit: int = Field(default=10, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


ShortCodePath = Annotated[
    str,
    Path(
        min_length=SHORT_CODE_MIN_LENGTH,
        max_length=SHORT_CODE_MAX_LENGTH,
        pattern=SHORT_CODE_PATTERN,
        description="Short code: 4-20 letters, digits, hyphens or underscores",
        examples=["aB3xYz"],
    ),
]
