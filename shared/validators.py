"""
Framework-agnostic URL validation.
"""

from __future__ import annotations

from typing import Sequence
from urllib.parse import urlparse

import validators as _validators

MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = ("http", "https")

SHORT_CODE_PATTERN = r"^[A-Za-z0-9_-]+$"
SHORT_CODE_MIN_LENGTH = 4
SHORT_CODE_MAX_LENGTH = 20


def validate_url(
    url: str,
    blocked_self_domains: Sequence[str] = (),
) -> bool:
    """Return True if *url* is a valid, non-self-referential HTTP/S URL.

    Args:
        url: The URL string to validate.
        blocked_self_domains: Host names that must not be the URL's host
            (sub-domains included), to prevent redirect loops through this
            service.

    Returns:
        True when the URL has an http/https scheme, fits in 2048 characters,
        passes format validation AND does not point at a blocked host.
    """
    if not url or len(url) > MAX_URL_LENGTH:
        return False
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return False
    if not _validators.url(url, skip_ipv4_addr=True, skip_ipv6_addr=True):
        return False

    host = (parsed.hostname or "").lower()
    for domain in blocked_self_domains:
        domain = domain.lower()
        if domain and (host == domain or host.endswith("." + domain)):
            return False
    return True

