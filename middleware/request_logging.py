"""
Request logging middleware.

Provides:
- A request ID per request, bound into the structlog context and returned in
  the ``X-Request-ID`` header
- One ``request_completed`` event per request with status and timing
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip, should_sample

log = get_logger("url_redirector.request")


def generate_request_id() -> str:
    """Generate a unique request ID for correlation."""
    return f"req_{uuid.uuid4().hex[:12]}"


def _should_log(request: Request, status_code: int) -> bool:
    # Redirects are the hot path; sample successful ones
    if status_code < 400 and not request.url.path.startswith(("/api", "/health")):
        return should_sample("url_redirect")
    return True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        request_id = generate_request_id()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            ip_hash=hash_ip(get_client_ip(request)),
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            log.error(
                "request_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
            raise

        duration_ms = int((time.perf_counter() - start) * 1000)
        status_code = response.status_code

        if _should_log(request, status_code):
            if status_code >= 500:
                log_fn = log.error
            elif status_code >= 400:
                log_fn = log.warning
            else:
                log_fn = log.info
            log_fn(
                "request_completed",
                status_code=status_code,
                duration_ms=duration_ms,
                user_agent=request.headers.get("User-Agent", "")[:100],
            )

        response.headers["X-Request-ID"] = request_id
        return response
