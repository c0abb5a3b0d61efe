"""
Client IP resolution for FastAPI requests.

Used as the rate-limit bucket key and for request logging.
"""

from __future__ import annotations

from starlette.requests import Request

# Checked in order; the first non-empty value wins
PROXY_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(request: Request) -> str:
    """Return the originating client IP for *request*.

    Proxy headers are honoured before the socket peer address. For
    ``X-Forwarded-For`` only the left-most (original client) entry is used.
    Returns ``""`` when nothing is known, e.g. for some test transports.
    """
    for header in PROXY_HEADERS:
        value = request.headers.get(header)
        if value:
            client_ip = value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""
