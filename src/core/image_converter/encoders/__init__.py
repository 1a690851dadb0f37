from __future__ import annotations

from functools import lru_cache
from typing import Dict, Type

from .avif import AVIFEncoder
from .base import BasePillowEncoder, Encoder, flatten_alpha
from .heif import HEIFEncoder, ensure_heif_support
from .jpeg import JPEGEncoder
from .png import PNGEncoder
from .tiff import TIFFEncoder
from .webp import WEBPEncoder
from ..errors import CodecError
from ..formats import ImageFormat

_ENCODER_CLASSES: Dict[ImageFormat, Type[BasePillowEncoder]] = {
    ImageFormat.JPEG: JPEGEncoder,
    ImageFormat.JPG: JPEGEncoder,
    ImageFormat.PNG: PNGEncoder,
    ImageFormat.WEBP: WEBPEncoder,
    ImageFormat.AVIF: AVIFEncoder,
    ImageFormat.TIFF: TIFFEncoder,
    ImageFormat.HEIF: HEIFEncoder,
}


@lru_cache(maxsize=len(_ENCODER_CLASSES))
def get_encoder(image_format: ImageFormat) -> Encoder:
    encoder_cls = _ENCODER_CLASSES.get(image_format)
    if not encoder_cls:
        raise CodecError("UNSUPPORTED_OUTPUT", f"No encoder registered for {image_format.value}")
    return encoder_cls()


__all__ = [
    "BasePillowEncoder",
    "Encoder",
    "ensure_heif_support",
    "flatten_alpha",
    "get_encoder",
]
