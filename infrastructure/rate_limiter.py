"""
Per-client-IP rate limiting for the /api routes.

One fixed-window limit from RateLimitSettings is shared by every /api route,
so a client's requests to /api/shorten and /api/stats draw from the same
budget. The routers attach enforce_api_rate_limit as a dependency; the
redirect, "/", "/health" and the docs are never counted.

Counters are kept in Redis when REDIS_URI is configured, otherwise in process
memory (the same storage and strategy model flask-limiter is built on).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request
from limits import RateLimitItem, parse
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter
from redis.exceptions import RedisError

from errors import RateLimitError
from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip

if TYPE_CHECKING:
    from config import AppSettings

log = get_logger(__name__)

API_SCOPE = "api"


class ApiRateLimiter:
    """Fixed-window counter keyed on client IP, one per app."""

    def __init__(self, limit: RateLimitItem, storage_uri: str, enabled: bool = True) -> None:
        self.limit = limit
        self.storage_uri = storage_uri
        self.enabled = enabled
        self._storage = storage_from_string(storage_uri)
        self._strategy = FixedWindowRateLimiter(self._storage)

    def hit(self, client_ip: str) -> bool:
        """Count one request; False once the client is over the limit."""
        return self._strategy.hit(self.limit, API_SCOPE, client_ip)

    def reset(self) -> None:
        self._storage.reset()


def build_limiter(settings: "AppSettings") -> ApiRateLimiter:
    rate_limit = settings.rate_limit
    return ApiRateLimiter(
        limit=parse(rate_limit.limit_string),
        storage_uri=settings.redis.redis_uri or "memory://",
        enabled=rate_limit.rate_limit_enabled,
    )


def enforce_api_rate_limit(request: Request) -> None:
    """Router dependency: raise RateLimitError (429) once the client's budget is spent."""
    limiter: ApiRateLimiter = request.app.state.limiter
    if not limiter.enabled:
        return

    client_ip = get_client_ip(request)
    try:
        allowed = limiter.hit(client_ip)
    except RedisError as e:
        # Counter storage down: serve the request, /health reports Redis as degraded
        log.error("rate_limit_storage_error", error=str(e), error_type=type(e).__name__)
        return

    if allowed:
        return

    log.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        ip_hash=hash_ip(client_ip),
        limit=str(limiter.limit),
    )
    raise RateLimitError(
        "Too many requests from this IP, please try again later.",
        details={"limit": str(limiter.limit)},
    )
