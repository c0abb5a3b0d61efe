"""
URL mapping repository: the only module that talks to the `urls` collection.

Every method is a single MongoDB operation, so the atomicity guarantees are
MongoDB's own: unique indexes on ``short_code`` and ``original_url`` reject
duplicates, and clicks are counted with ``$inc``.

pymongo's DuplicateKeyError is translated to errors.DuplicateKeyError (with
the offending field); every other PyMongoError becomes RepositoryError.
"""

from __future__ import annotations

import functools
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pymongo import DESCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError
from pymongo.errors import PyMongoError

from errors import DuplicateKeyError, RepositoryError
from schemas.models.url import UrlMappingDoc
from shared.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

_UNIQUE_FIELDS = ("short_code", "original_url")


def _duplicate_field(exc: MongoDuplicateKeyError) -> Optional[str]:
    key_pattern = (exc.details or {}).get("keyPattern") or {}
    for field in _UNIQUE_FIELDS:
        if field in key_pattern:
            return field
    # Older servers only report the index name in the message
    message = str(exc)
    for field in _UNIQUE_FIELDS:
        if field in message:
            return field
    return None


def _translate_errors(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    @functools.wraps(func)
    async def wrapper(self: "UrlRepository", *args: Any, **kwargs: Any) -> T:
        try:
            return await func(self, *args, **kwargs)
        except MongoDuplicateKeyError as exc:
            field = _duplicate_field(exc)
            raise DuplicateKeyError(
                f"Duplicate value for {field or 'unique key'}", field=field
            ) from exc
        except PyMongoError as exc:
            log.error(
                "repository_error",
                operation=func.__name__,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise RepositoryError(
                "Database operation failed", details=str(exc)
            ) from exc

    return wrapper


class UrlRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    @_translate_errors
    async def find_by_original_url(self, original_url: str) -> Optional[UrlMappingDoc]:
        doc = await self._col.find_one({"original_url": original_url})
        return UrlMappingDoc.from_mongo(doc)

    @_translate_errors
    async def find_by_short_code(self, short_code: str) -> Optional[UrlMappingDoc]:
        doc = await self._col.find_one({"short_code": short_code})
        return UrlMappingDoc.from_mongo(doc)

    @_translate_errors
    async def exists_by_short_code(self, short_code: str) -> bool:
        doc = await self._col.find_one({"short_code": short_code}, {"_id": 1})
        return doc is not None

    @_translate_errors
    async def create(self, original_url: str, short_code: str) -> UrlMappingDoc:
        """Insert a new mapping.

        Raises:
            DuplicateKeyError: if either unique index rejects the insert.
        """
        mapping = UrlMappingDoc.new(original_url, short_code)
        result = await self._col.insert_one(mapping.to_mongo())
        mapping.id = result.inserted_id
        return mapping

    @_translate_errors
    async def increment_click_count(self, short_code: str) -> Optional[UrlMappingDoc]:
        """Atomically add one click; returns the updated mapping or None."""
        doc = await self._col.find_one_and_update(
            {"short_code": short_code},
            {
                "$inc": {"click_count": 1},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
            return_document=ReturnDocument.AFTER,
        )
        return UrlMappingDoc.from_mongo(doc)

    @_translate_errors
    async def delete_by_short_code(self, short_code: str) -> Optional[UrlMappingDoc]:
        """Remove a mapping; returns the removed document, None if absent."""
        doc = await self._col.find_one_and_delete({"short_code": short_code})
        return UrlMappingDoc.from_mongo(doc)

    @_translate_errors
    async def count(self) -> int:
        return await self._col.count_documents({})

    @_translate_errors
    async def find_recent(self, limit: int = 10, offset: int = 0) -> list[UrlMappingDoc]:
        """Newest mappings first."""
        cursor = (
            self._col.find({})
            .sort("created_at", DESCENDING)
            .skip(offset)
            .limit(limit)
        )
        docs = await cursor.to_list(length=limit)
        return [UrlMappingDoc.from_mongo(doc) for doc in docs]
