"""
Redirect and statistics service.

resolve() counts a click with one atomic ``find_one_and_update`` so
concurrent redirects of the same code never lose an increment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from repositories.url_repository import UrlRepository
from schemas.models.url import UrlMappingDoc
from shared.logging import get_logger, should_sample

log = get_logger(__name__)

RECENT_URLS_LIMIT = 10
MAX_PAGE_SIZE = 100


@dataclass
class OverallStats:
    total_urls: int
    recent_urls: list[UrlMappingDoc]


@dataclass
class UrlPage:
    items: list[UrlMappingDoc]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


class RedirectService:
    def __init__(self, repository: UrlRepository) -> None:
        self._repo = repository

    async def resolve(self, short_code: str) -> Optional[str]:
        """Original URL for *short_code*, or None. Counts one click."""
        mapping = await self._repo.increment_click_count(short_code)
        if mapping is None:
            log.info("url_redirect_miss", short_code=short_code)
            return None
        if should_sample("url_redirect"):
            log.info(
                "url_redirect",
                short_code=short_code,
                click_count=mapping.click_count,
            )
        return mapping.original_url

    async def get_stats(self, short_code: str) -> Optional[UrlMappingDoc]:
        mapping = await self._repo.find_by_short_code(short_code)
        if mapping is not None and should_sample("stats_query"):
            log.info("stats_query", short_code=short_code)
        return mapping

    async def get_overall_stats(self) -> OverallStats:
        total = await self._repo.count()
        recent = await self._repo.find_recent(limit=RECENT_URLS_LIMIT)
        return OverallStats(total_urls=total, recent_urls=recent)

    async def list_urls(self, limit: int = 10, offset: int = 0) -> UrlPage:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        offset = max(0, offset)
        total = await self._repo.count()
        items = await self._repo.find_recent(limit=limit, offset=offset)
        return UrlPage(items=items, total=total, limit=limit, offset=offset)

    async def pop(self, short_code: str) -> Optional[UrlMappingDoc]:
        """Delete the mapping and return it; None if it did not exist."""
        removed = await self._repo.delete_by_short_code(short_code)
        if removed is not None:
            log.info(
                "url_deleted",
                short_code=short_code,
                click_count=removed.click_count,
            )
        return removed

    async def delete(self, short_code: str) -> bool:
        return await self.pop(short_code) is not None
