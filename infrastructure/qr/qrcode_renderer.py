"""qrcode + Pillow implementation of QrRenderer.

Matrix computation and PNG encoding are CPU-bound, so each render runs in a
worker thread and the event loop stays free.
"""

from __future__ import annotations

import asyncio
import base64
import io

import qrcode
from PIL import Image
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)
from qrcode.image.pil import PilImage

from errors import RenderError
from shared.logging import get_logger

log = get_logger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class QrCodeRenderer:
    def __init__(self, error_correction: str = "M", border: int = 1) -> None:
        if error_correction not in ERROR_CORRECTION_LEVELS:
            raise ValueError(f"Unknown error correction level: {error_correction!r}")
        self._error_correction = ERROR_CORRECTION_LEVELS[error_correction]
        self._border = border

    def _render(self, data: str, size: int) -> bytes:
        qr = qrcode.QRCode(
            error_correction=self._error_correction,
            box_size=10,
            border=self._border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        image = qr.make_image(
            image_factory=PilImage, fill_color="black", back_color="white"
        ).get_image()
        image = image.convert("RGB").resize(
            (size, size), Image.Resampling.NEAREST
        )

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    async def render_png(self, data: str, size: int) -> bytes:
        try:
            return await asyncio.to_thread(self._render, data, size)
        except Exception as e:
            log.error("qr_render_failed", error=str(e), error_type=type(e).__name__)
            raise RenderError("Failed to generate QR code", details=str(e)) from e

    async def render_data_uri(self, data: str, size: int) -> str:
        png = await self.render_png(data, size)
        return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
