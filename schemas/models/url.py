"""
URL mapping document model.

  UrlMappingDoc → urls  (ObjectId _id; unique short_code and original_url)
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field

from schemas.models.base import MongoDocument


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UrlMappingDoc(MongoDocument):
    """
    Document model for the `urls` collection.

    click_count is only ever changed with an atomic ``$inc``; updated_at moves
    with it.
    """

    original_url: str
    short_code: str
    click_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def new(cls, original_url: str, short_code: str) -> "UrlMappingDoc":
        """A fresh mapping with zero clicks and matching timestamps."""
        now = utcnow()
        return cls(
            original_url=original_url,
            short_code=short_code,
            created_at=now,
            updated_at=now,
        )
