from __future__ import annotations

from functools import lru_cache

from .base import BasePillowEncoder
from ..errors import CodecError
from ..formats import ImageFormat


@lru_cache(maxsize=1)
def ensure_heif_support() -> None:
    """Register the pillow-heif opener and saver with Pillow once per process."""

    try:
        from pillow_heif import register_heif_opener
    except ModuleNotFoundError as exc:  # pragma: no cover - import guard
        raise CodecError(
            "MISSING_DEPENDENCY",
            "pillow-heif is required to read or write HEIF images",
        ) from exc
    register_heif_opener()


class HEIFEncoder(BasePillowEncoder):
    image_format = ImageFormat.HEIF
    pil_format = "HEIF"

    def __init__(self) -> None:
        ensure_heif_support()
        super().__init__()
