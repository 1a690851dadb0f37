from __future__ import annotations

from .base import BasePillowEncoder
from ..formats import ImageFormat


class AVIFEncoder(BasePillowEncoder):
    image_format = ImageFormat.AVIF
    pil_format = "AVIF"
