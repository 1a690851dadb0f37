from __future__ import annotations

from typing import Any

from .base import BasePillowEncoder
from ..formats import ImageFormat


def quality_to_compress_level(quality: int) -> int:
    """Map 1..100 onto zlib levels 9..0; PNG stays lossless either way."""

    quality = max(1, min(100, quality))
    return round((100 - quality) * 9 / 99)


class PNGEncoder(BasePillowEncoder):
    image_format = ImageFormat.PNG
    pil_format = "PNG"

    def save_options(self, quality: int) -> dict[str, Any]:
        return {"compress_level": quality_to_compress_level(quality)}
