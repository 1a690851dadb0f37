from __future__ import annotations

from typing import Any

from PIL import Image

from .base import BasePillowEncoder, flatten_alpha
from ..formats import ImageFormat


class TIFFEncoder(BasePillowEncoder):
    image_format = ImageFormat.TIFF
    pil_format = "TIFF"
    supports_alpha = False

    def prepare(self, image: Image.Image) -> Image.Image:
        # libtiff only writes JPEG-compressed strips for RGB and greyscale
        flattened = flatten_alpha(image)
        if flattened.mode not in ("RGB", "L"):
            return flattened.convert("RGB")
        return flattened

    def save_options(self, quality: int) -> dict[str, Any]:
        return {"compression": "jpeg", "quality": quality}
