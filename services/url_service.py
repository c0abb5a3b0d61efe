"""
Shortening service: get-or-create a mapping for a long URL.

The lookup by original URL and the insert are two separate operations.
Concurrent requests for the same new URL can both miss the lookup; the
unique index on ``original_url`` then rejects the second insert and that
request answers with the winner's mapping ("already exists"). If that
mapping is deleted before it can be read back, the insert is retried.
"""

from __future__ import annotations

from dataclasses import dataclass

from errors import CodeSpaceExhaustedError, DuplicateKeyError
from repositories.url_repository import UrlRepository
from schemas.models.url import UrlMappingDoc
from shared.generators import DEFAULT_CODE_LENGTH, generate_short_code
from shared.logging import get_logger

log = get_logger(__name__)

MAX_ATTEMPTS_PER_LENGTH = 10
MAX_CODE_LENGTH = 12
MAX_CREATE_ATTEMPTS = 3


@dataclass
class ShortenResult:
    short_url: str
    original_url: str
    short_code: str
    qr_code_url: str
    is_new: bool


class ShortenService:
    def __init__(
        self,
        repository: UrlRepository,
        base_url: str,
        code_length: int = DEFAULT_CODE_LENGTH,
        max_attempts: int = MAX_ATTEMPTS_PER_LENGTH,
        max_code_length: int = MAX_CODE_LENGTH,
    ) -> None:
        self._repo = repository
        self.base_url = base_url.rstrip("/")
        self.code_length = code_length
        self.max_attempts = max_attempts
        self.max_code_length = max_code_length

    def _result(self, mapping: UrlMappingDoc, is_new: bool) -> ShortenResult:
        return ShortenResult(
            short_url=f"{self.base_url}/{mapping.short_code}",
            original_url=mapping.original_url,
            short_code=mapping.short_code,
            qr_code_url=f"{self.base_url}/api/qr/{mapping.short_code}",
            is_new=is_new,
        )

    async def shorten(self, original_url: str) -> ShortenResult:
        """Return the mapping for *original_url*, creating it if needed.

        Raises:
            CodeSpaceExhaustedError: no free code up to ``max_code_length``, or
                every insert attempt lost a race.
            RepositoryError: the database failed.
        """
        existing = await self._repo.find_by_original_url(original_url)
        if existing is not None:
            return self._result(existing, is_new=False)

        for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
            short_code = await self.generate_unique_code()
            try:
                mapping = await self._repo.create(original_url, short_code)
            except DuplicateKeyError as exc:
                if exc.field == "short_code":
                    # Another request took the code between check and insert
                    log.warning(
                        "short_code_taken_on_insert",
                        short_code=short_code,
                        attempt=attempt,
                    )
                    continue
                winner = await self._repo.find_by_original_url(original_url)
                if winner is None:
                    # The winning mapping was deleted before it could be read
                    log.warning("url_shorten_winner_vanished", attempt=attempt)
                    continue
                log.info("url_shorten_race_lost", short_code=winner.short_code)
                return self._result(winner, is_new=False)

            log.info(
                "url_shortened",
                short_code=mapping.short_code,
                code_length=len(mapping.short_code),
            )
            return self._result(mapping, is_new=True)

        log.error("short_code_insert_retries_exhausted", attempts=MAX_CREATE_ATTEMPTS)
        raise CodeSpaceExhaustedError("Unable to generate unique short code")

    async def generate_unique_code(self) -> str:
        """Draw codes until one is free.

        ``max_attempts`` collisions at one length bump the length by one; past
        ``max_code_length`` the code space is considered exhausted.
        """
        length = self.code_length
        attempts = 0
        while length <= self.max_code_length:
            short_code = generate_short_code(length)
            if not await self._repo.exists_by_short_code(short_code):
                return short_code

            attempts += 1
            if attempts >= self.max_attempts:
                log.warning(
                    "short_code_length_escalated",
                    from_length=length,
                    to_length=length + 1,
                )
                length += 1
                attempts = 0

        log.error(
            "code_space_exhausted",
            start_length=self.code_length,
            max_length=self.max_code_length,
            attempts_per_length=self.max_attempts,
        )
        raise CodeSpaceExhaustedError("Unable to generate unique short code")
