"""Image rendering interface that QrService depends on."""

from typing import Protocol


class QrRenderer(Protocol):
    async def render_png(self, data: str, size: int) -> bytes: ...

    async def render_data_uri(self, data: str, size: int) -> str: ...
