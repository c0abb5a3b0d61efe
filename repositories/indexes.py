"""
Index bootstrap for the `urls` collection.

The unique indexes are what actually guarantee one mapping per short code
and per original URL; the service-level lookups only avoid needless writes.
"""

from __future__ import annotations

from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase

from shared.logging import get_logger

log = get_logger(__name__)


async def ensure_indexes(db: AsyncDatabase, collection_name: str = "urls") -> None:
    col = db[collection_name]
    await col.create_index([("short_code", ASCENDING)], unique=True)
    await col.create_index([("original_url", ASCENDING)], unique=True)
    await col.create_index([("created_at", DESCENDING)])
    log.info("indexes_ensured", collection=collection_name)
