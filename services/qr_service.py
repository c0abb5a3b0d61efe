"""
QR service: renders the short link of an existing mapping as a QR code.

Only composes the target URL and checks existence; the image itself comes
from the injected QrRenderer.
"""

from __future__ import annotations

from typing import Union

from errors import NotFoundError
from infrastructure.qr.protocol import QrRenderer
from repositories.url_repository import UrlRepository
from shared.logging import get_logger

log = get_logger(__name__)

DEFAULT_QR_SIZE = 200


class QrService:
    def __init__(
        self, repository: UrlRepository, renderer: QrRenderer, base_url: str
    ) -> None:
        self._repo = repository
        self._renderer = renderer
        self.base_url = base_url.rstrip("/")

    def target_url(self, short_code: str) -> str:
        return f"{self.base_url}/{short_code}"

    async def can_generate(self, short_code: str) -> bool:
        return await self._repo.exists_by_short_code(short_code)

    async def render(
        self, short_code: str, format: str = "png", size: int = DEFAULT_QR_SIZE
    ) -> Union[bytes, str]:
        """PNG bytes, or a ``data:image/png;base64,...`` URI for ``base64``.

        Raises:
            NotFoundError: *short_code* is unknown (nothing is rendered).
            RenderError: the renderer failed.
        """
        if not await self.can_generate(short_code):
            raise NotFoundError("Short code not found", field="shortCode")

        target = self.target_url(short_code)
        log.debug("qr_render", short_code=short_code, format=format, size=size)
        if format == "base64":
            return await self._renderer.render_data_uri(target, size)
        return await self._renderer.render_png(target, size)
