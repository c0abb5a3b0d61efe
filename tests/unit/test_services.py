"""Unit tests for the service layer, backed by the in-memory repository."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from errors import CodeSpaceExhaustedError, DuplicateKeyError, NotFoundError
from services import url_service
from services.qr_service import QrService
from services.redirect_service import RedirectService
from services.url_service import ShortenService
from shared.generators import ALPHABET

BASE_URL = "http://sho.rt"
LONG_URL = "https://example.com/very/long/url"


@pytest.fixture
def shortener(repo) -> ShortenService:
    return ShortenService(repo, BASE_URL)


@pytest.fixture
def redirects(repo) -> RedirectService:
    return RedirectService(repo)


# ── ShortenService ────────────────────────────────────────────────────────────


class TestShorten:
    async def test_new_url(self, shortener):
        result = await shortener.shorten(LONG_URL)
        assert result.is_new is True
        assert len(result.short_code) == 6
        assert set(result.short_code) <= set(ALPHABET)
        assert result.short_url == f"{BASE_URL}/{result.short_code}"
        assert result.qr_code_url == f"{BASE_URL}/api/qr/{result.short_code}"
        assert result.original_url == LONG_URL

    async def test_same_url_is_idempotent(self, shortener, repo):
        first = await shortener.shorten(LONG_URL)
        second = await shortener.shorten(LONG_URL)
        assert second.is_new is False
        assert second.short_code == first.short_code
        assert await repo.count() == 1

    async def test_different_urls_get_different_codes(self, shortener):
        a = await shortener.shorten("https://example.com/a")
        b = await shortener.shorten("https://example.com/b")
        assert a.short_code != b.short_code

    async def test_configured_code_length(self, repo):
        service = ShortenService(repo, BASE_URL, code_length=9)
        result = await service.shorten(LONG_URL)
        assert len(result.short_code) == 9

    async def test_trailing_slash_in_base_url(self, repo):
        service = ShortenService(repo, BASE_URL + "/")
        result = await service.shorten(LONG_URL)
        assert result.short_url == f"{BASE_URL}/{result.short_code}"

    async def test_concurrent_shortens_share_one_mapping(self, shortener, repo, mocker):
        create = mocker.spy(repo, "create")
        results = await asyncio.gather(*(shortener.shorten(LONG_URL) for _ in range(5)))
        # Every request missed the lookup; the unique index picked one winner
        assert create.call_count == 5
        assert sum(r.is_new for r in results) == 1
        assert len({r.short_code for r in results}) == 1
        assert await repo.count() == 1


class TestGenerateUniqueCode:
    async def test_escalates_length_after_collisions(self, repo, mocker):
        # Every 6-character code is "taken"; longer ones are free
        mocker.patch.object(
            repo,
            "exists_by_short_code",
            AsyncMock(side_effect=lambda code: len(code) == 6),
        )
        service = ShortenService(repo, BASE_URL, max_attempts=3)
        code = await service.generate_unique_code()
        assert len(code) == 7
        assert repo.exists_by_short_code.await_count == 4

    async def test_exhausted(self, repo, mocker):
        mocker.patch.object(
            repo, "exists_by_short_code", AsyncMock(return_value=True)
        )
        service = ShortenService(repo, BASE_URL, max_attempts=2, max_code_length=8)
        with pytest.raises(CodeSpaceExhaustedError):
            await service.generate_unique_code()
        # lengths 6, 7 and 8, two draws each
        assert repo.exists_by_short_code.await_count == 6

    async def test_exhaustion_surfaces_from_shorten(self, repo, mocker):
        mocker.patch.object(
            repo, "exists_by_short_code", AsyncMock(return_value=True)
        )
        service = ShortenService(repo, BASE_URL, max_attempts=1, max_code_length=6)
        with pytest.raises(CodeSpaceExhaustedError):
            await service.shorten(LONG_URL)
        assert await repo.count() == 0


class TestShortenRaces:
    async def test_code_taken_between_check_and_insert(self, shortener, repo, mocker):
        real_create = repo.create
        attempted: list[str] = []

        async def create_after_one_collision(original_url, short_code):
            attempted.append(short_code)
            if len(attempted) == 1:
                raise DuplicateKeyError("dup", field="short_code")
            return await real_create(original_url, short_code)

        mocker.patch.object(repo, "create", create_after_one_collision)

        result = await shortener.shorten(LONG_URL)
        assert result.is_new is True
        assert len(attempted) == 2
        assert result.short_code == attempted[1]
        assert await repo.count() == 1

    async def test_original_url_race_returns_winner(self, shortener, repo, mocker):
        winner = await repo.create(LONG_URL, "Winr12")
        # The lookup misses (the other request has not committed yet) ...
        mocker.patch.object(
            repo,
            "find_by_original_url",
            AsyncMock(side_effect=[None, winner]),
        )
        # ... and the insert then hits the unique index on original_url
        mocker.patch.object(
            repo,
            "create",
            AsyncMock(side_effect=DuplicateKeyError("dup", field="original_url")),
        )

        result = await shortener.shorten(LONG_URL)
        assert result.is_new is False
        assert result.short_code == "Winr12"

    async def test_vanished_winner_retries_insert(self, shortener, repo, mocker):
        # The winner is deleted before it can be read back
        mocker.patch.object(repo, "find_by_original_url", AsyncMock(return_value=None))
        real_create = repo.create
        calls: list[str] = []

        async def create_after_lost_race(original_url, short_code):
            calls.append(short_code)
            if len(calls) == 1:
                raise DuplicateKeyError("dup", field="original_url")
            return await real_create(original_url, short_code)

        mocker.patch.object(repo, "create", create_after_lost_race)

        result = await shortener.shorten(LONG_URL)
        assert result.is_new is True
        assert result.short_code == calls[1]
        assert await repo.count() == 1

    async def test_winner_vanishing_every_time_exhausts_retries(
        self, shortener, repo, mocker
    ):
        mocker.patch.object(repo, "find_by_original_url", AsyncMock(return_value=None))
        create = AsyncMock(side_effect=DuplicateKeyError("dup", field="original_url"))
        mocker.patch.object(repo, "create", create)
        with pytest.raises(CodeSpaceExhaustedError):
            await shortener.shorten(LONG_URL)
        assert create.await_count == url_service.MAX_CREATE_ATTEMPTS

    async def test_insert_retries_exhausted(self, shortener, repo, mocker):
        create = AsyncMock(side_effect=DuplicateKeyError("dup", field="short_code"))
        mocker.patch.object(repo, "create", create)
        with pytest.raises(CodeSpaceExhaustedError):
            await shortener.shorten(LONG_URL)
        assert create.await_count == url_service.MAX_CREATE_ATTEMPTS


# ── RedirectService ───────────────────────────────────────────────────────────


class TestRedirect:
    async def test_round_trip(self, shortener, redirects):
        created = await shortener.shorten(LONG_URL)
        assert await redirects.resolve(created.short_code) == LONG_URL

    async def test_counts_each_click(self, shortener, redirects):
        created = await shortener.shorten(LONG_URL)
        for _ in range(5):
            await redirects.resolve(created.short_code)
        stats = await redirects.get_stats(created.short_code)
        assert stats.click_count == 5
        assert stats.updated_at >= stats.created_at

    async def test_concurrent_clicks_all_counted(self, shortener, redirects):
        created = await shortener.shorten(LONG_URL)
        await asyncio.gather(*(redirects.resolve(created.short_code) for _ in range(20)))
        stats = await redirects.get_stats(created.short_code)
        assert stats.click_count == 20

    async def test_unknown_code(self, redirects):
        assert await redirects.resolve("zzzz99") is None

    async def test_stats_unknown_code(self, redirects):
        assert await redirects.get_stats("zzzz99") is None

    async def test_stats_do_not_count_clicks(self, shortener, redirects):
        created = await shortener.shorten(LONG_URL)
        await redirects.get_stats(created.short_code)
        stats = await redirects.get_stats(created.short_code)
        assert stats.click_count == 0


class TestOverallStatsAndListing:
    async def test_overall_stats(self, shortener, redirects):
        for i in range(12):
            await shortener.shorten(f"https://example.com/{i}")
        stats = await redirects.get_overall_stats()
        assert stats.total_urls == 12
        assert len(stats.recent_urls) == 10

    async def test_overall_stats_empty(self, redirects):
        stats = await redirects.get_overall_stats()
        assert stats.total_urls == 0
        assert stats.recent_urls == []

    async def test_list_urls_page(self, shortener, redirects):
        for i in range(5):
            await shortener.shorten(f"https://example.com/{i}")
        page = await redirects.list_urls(limit=2, offset=2)
        assert page.total == 5
        assert len(page.items) == 2
        assert page.has_more is True

        last = await redirects.list_urls(limit=2, offset=4)
        assert len(last.items) == 1
        assert last.has_more is False

    async def test_list_urls_clamps(self, redirects):
        page = await redirects.list_urls(limit=1000, offset=-5)
        assert page.limit == 100
        assert page.offset == 0


class TestDelete:
    async def test_delete_then_missing(self, shortener, redirects):
        created = await shortener.shorten(LONG_URL)
        assert await redirects.delete(created.short_code) is True
        assert await redirects.resolve(created.short_code) is None
        assert await redirects.delete(created.short_code) is False

    async def test_pop_returns_removed(self, shortener, redirects):
        created = await shortener.shorten(LONG_URL)
        removed = await redirects.pop(created.short_code)
        assert removed.original_url == LONG_URL

    async def test_url_can_be_shortened_again_after_delete(self, shortener, redirects):
        first = await shortener.shorten(LONG_URL)
        await redirects.delete(first.short_code)
        again = await shortener.shorten(LONG_URL)
        assert again.is_new is True


# ── QrService ─────────────────────────────────────────────────────────────────


@pytest.fixture
def renderer():
    r = AsyncMock()
    r.render_png.return_value = b"\x89PNG fake"
    r.render_data_uri.return_value = "data:image/png;base64,ZmFrZQ=="
    return r


class TestQrService:
    def test_target_url(self, repo, renderer):
        service = QrService(repo, renderer, BASE_URL + "/")
        assert service.target_url("aB3xYz") == "http://sho.rt/aB3xYz"

    async def test_unknown_code_not_rendered(self, repo, renderer):
        service = QrService(repo, renderer, BASE_URL)
        assert await service.can_generate("zzzz99") is False
        with pytest.raises(NotFoundError):
            await service.render("zzzz99")
        renderer.render_png.assert_not_awaited()

    async def test_png(self, repo, renderer):
        await repo.create(LONG_URL, "aB3xYz")
        service = QrService(repo, renderer, BASE_URL)
        png = await service.render("aB3xYz", size=300)
        assert png == b"\x89PNG fake"
        renderer.render_png.assert_awaited_once_with("http://sho.rt/aB3xYz", 300)

    async def test_base64(self, repo, renderer):
        await repo.create(LONG_URL, "aB3xYz")
        service = QrService(repo, renderer, BASE_URL)
        uri = await service.render("aB3xYz", format="base64")
        assert uri.startswith("data:image/png;base64,")
        renderer.render_data_uri.assert_awaited_once_with("http://sho.rt/aB3xYz", 200)
