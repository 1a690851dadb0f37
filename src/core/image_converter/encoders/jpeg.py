from __future__ import annotations

from typing import Any

from .base import BasePillowEncoder
from ..formats import ImageFormat


class JPEGEncoder(BasePillowEncoder):
    image_format = ImageFormat.JPEG
    pil_format = "JPEG"
    supports_alpha = False

    def save_options(self, quality: int) -> dict[str, Any]:
        return {"quality": quality, "optimize": True}
