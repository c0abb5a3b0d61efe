"""Unit tests for request and response DTOs."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from schemas.dto.requests.url import ListUrlsQuery, ShortenRequest
from schemas.dto.responses.common import ErrorResponse
from schemas.dto.responses.url import (
    DeleteUrlResponse,
    Pagination,
    ShortenData,
    ShortenResponse,
    UrlMappingItem,
)
from schemas.models.url import UrlMappingDoc


def _doc(**overrides) -> UrlMappingDoc:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    base = dict(
        _id=ObjectId("507f1f77bcf86cd799439011"),
        original_url="https://example.com",
        short_code="aB3xYz",
        click_count=7,
        created_at=now,
        updated_at=now,
    )
    base.update(overrides)
    return UrlMappingDoc.model_validate(base)


# ── ShortenRequest ────────────────────────────────────────────────────────────


class TestShortenRequest:
    def test_accepts_url(self):
        req = ShortenRequest.model_validate({"url": "https://example.com"})
        assert req.url == "https://example.com"

    def test_url_key_required(self):
        with pytest.raises(ValidationError):
            ShortenRequest.model_validate({"long_url": "https://example.com"})

    def test_strips_whitespace(self):
        req = ShortenRequest.model_validate({"url": "  https://example.com \n"})
        assert req.url == "https://example.com"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"url": ""}, {"url": "   "}, {"url": 42}, {"url": "https://e.co/" + "a" * 2048}],
        ids=["missing", "empty", "blank", "not_a_string", "too_long"],
    )
    def test_rejects_bad_input(self, payload):
        with pytest.raises(ValidationError):
            ShortenRequest.model_validate(payload)


# ── ListUrlsQuery ─────────────────────────────────────────────────────────────


class TestListUrlsQuery:
    def test_defaults(self):
        q = ListUrlsQuery()
        assert q.limit == 10
        assert q.offset == 0

    @pytest.mark.parametrize(
        "kwargs",
        [{"limit": 0}, {"limit": 101}, {"offset": -1}],
        ids=["limit_zero", "limit_too_big", "negative_offset"],
    )
    def test_bounds(self, kwargs):
        with pytest.raises(ValidationError):
            ListUrlsQuery(**kwargs)


# ── Responses ─────────────────────────────────────────────────────────────────


class TestUrlMappingItem:
    def test_from_doc_is_camel_case(self):
        item = UrlMappingItem.from_doc(_doc())
        data = item.model_dump(mode="json")
        assert data["id"] == "507f1f77bcf86cd799439011"
        assert data["originalUrl"] == "https://example.com"
        assert data["shortCode"] == "aB3xYz"
        assert data["clickCount"] == 7
        assert "original_url" not in data

    def test_from_doc_without_id(self):
        doc = UrlMappingDoc.new("https://example.com", "aB3xYz")
        assert UrlMappingItem.from_doc(doc).id is None


def test_shorten_response_shape():
    resp = ShortenResponse(
        message="URL shortened successfully",
        data=ShortenData(
            shortUrl="http://sho.rt/aB3xYz",
            originalUrl="https://example.com",
            shortCode="aB3xYz",
            qrCodeUrl="http://sho.rt/api/qr/aB3xYz",
            isNew=True,
        ),
    )
    data = resp.model_dump()
    assert data["success"] is True
    assert data["data"]["isNew"] is True


def test_delete_response_default_message():
    resp = DeleteUrlResponse(deletedUrl=UrlMappingItem.from_doc(_doc()))
    assert resp.message == "URL deleted successfully"


def test_pagination():
    p = Pagination(total=25, limit=10, offset=10, hasMore=True)
    assert p.model_dump() == {"total": 25, "limit": 10, "offset": 10, "hasMore": True}


def test_error_response_defaults():
    e = ErrorResponse(message="Short URL not found", code="not_found")
    assert e.success is False
    assert e.field is None
