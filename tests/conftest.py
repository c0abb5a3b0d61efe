"""
Shared test fixtures.

InMemoryUrlRepository mirrors UrlRepository's contract (including the unique
constraints on short_code and original_url) so service and HTTP tests run
without MongoDB. Lookups, inserts and click increments yield to the event loop
once, as a database round trip would, so asyncio.gather() callers interleave;
the insert and the increment themselves stay atomic.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from config import AppSettings, DatabaseSettings, RateLimitSettings
from errors import DuplicateKeyError
from schemas.models.url import UrlMappingDoc


class InMemoryUrlRepository:
    def __init__(self) -> None:
        self.docs: dict[str, UrlMappingDoc] = {}

    async def find_by_original_url(self, original_url: str) -> Optional[UrlMappingDoc]:
        await asyncio.sleep(0)
        for doc in self.docs.values():
            if doc.original_url == original_url:
                return doc.model_copy()
        return None

    async def find_by_short_code(self, short_code: str) -> Optional[UrlMappingDoc]:
        doc = self.docs.get(short_code)
        return doc.model_copy() if doc is not None else None

    async def exists_by_short_code(self, short_code: str) -> bool:
        return short_code in self.docs

    async def create(self, original_url: str, short_code: str) -> UrlMappingDoc:
        await asyncio.sleep(0)
        if short_code in self.docs:
            raise DuplicateKeyError("Duplicate value for short_code", field="short_code")
        if any(d.original_url == original_url for d in self.docs.values()):
            raise DuplicateKeyError(
                "Duplicate value for original_url", field="original_url"
            )
        doc = UrlMappingDoc.new(original_url, short_code)
        doc.id = ObjectId()
        self.docs[short_code] = doc
        return doc.model_copy()

    async def increment_click_count(self, short_code: str) -> Optional[UrlMappingDoc]:
        await asyncio.sleep(0)
        doc = self.docs.get(short_code)
        if doc is None:
            return None
        doc.click_count += 1
        doc.updated_at = datetime.now(timezone.utc)
        return doc.model_copy()

    async def delete_by_short_code(self, short_code: str) -> Optional[UrlMappingDoc]:
        return self.docs.pop(short_code, None)

    async def count(self) -> int:
        return len(self.docs)

    async def find_recent(self, limit: int = 10, offset: int = 0) -> list[UrlMappingDoc]:
        ordered = sorted(self.docs.values(), key=lambda d: d.created_at, reverse=True)
        return [d.model_copy() for d in ordered[offset : offset + limit]]


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def repo() -> InMemoryUrlRepository:
    return InMemoryUrlRepository()


@pytest.fixture
def make_settings():
    """Build AppSettings without touching the environment's MongoDB config."""

    def _make(**overrides) -> AppSettings:
        values = dict(
            env="test",
            base_url="http://sho.rt",
            db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
            rate_limit=RateLimitSettings(rate_limit_enabled=False),
        )
        values.update(overrides)
        return AppSettings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> AppSettings:
    return make_settings()


@pytest.fixture
def make_client(repo):
    """Build a TestClient around create_app() with the in-memory repository.

    The lifespan is not run, so no MongoDB connection is attempted.
    """
    from app import create_app
    from dependencies import get_url_repository

    def _make(settings: AppSettings, **client_kwargs) -> TestClient:
        app = create_app(settings)
        app.dependency_overrides[get_url_repository] = lambda: repo
        client_kwargs.setdefault("follow_redirects", False)
        return TestClient(app, **client_kwargs)

    return _make


@pytest.fixture
def client(make_client, settings) -> TestClient:
    return make_client(settings)
