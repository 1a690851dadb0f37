from __future__ import annotations

from .base import BasePillowEncoder
from ..formats import ImageFormat


class WEBPEncoder(BasePillowEncoder):
    image_format = ImageFormat.WEBP
    pil_format = "WEBP"
