from __future__ import annotations

from enum import Enum
from posixpath import basename


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    JPG = "jpg"
    PNG = "png"
    WEBP = "webp"
    TIFF = "tiff"
    AVIF = "avif"
    HEIF = "heif"
    GIF = "gif"
    SVG = "svg"
    RAW = "raw"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def content_type(self) -> str:
        return MIME_MAP.get(self, f"image/{self.value}")


class FitPolicy(str, Enum):
    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"
    INSIDE = "inside"
    OUTSIDE = "outside"


DEFAULT_INPUT_FORMATS: tuple[ImageFormat, ...] = (
    ImageFormat.JPEG,
    ImageFormat.JPG,
    ImageFormat.PNG,
    ImageFormat.WEBP,
    ImageFormat.TIFF,
    ImageFormat.AVIF,
    ImageFormat.HEIF,
    ImageFormat.GIF,
    ImageFormat.SVG,
    ImageFormat.RAW,
)

DEFAULT_OUTPUT_FORMATS: tuple[ImageFormat, ...] = (
    ImageFormat.JPEG,
    ImageFormat.PNG,
    ImageFormat.WEBP,
    ImageFormat.AVIF,
    ImageFormat.TIFF,
    ImageFormat.HEIF,
)

MIME_MAP: dict[ImageFormat, str] = {
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.JPG: "image/jpeg",
    ImageFormat.SVG: "image/svg+xml",
}

_HEIF_BRANDS = {b"heic", b"heix", b"hevc", b"hevx", b"heim", b"heis", b"mif1", b"msf1"}
_AVIF_BRANDS = {b"avif", b"avis"}


def extension_of(entry_name: str) -> str:
    """Lower-cased extension of the leaf name, without the dot; empty if none."""

    leaf = basename(entry_name)
    stem, dot, extension = leaf.rpartition(".")
    if not dot or not stem:
        return ""
    return extension.lower()


def sniff_image_format(data: bytes) -> ImageFormat | None:
    head = data[:1024]
    if head.startswith(b"\xff\xd8\xff"):
        return ImageFormat.JPEG
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return ImageFormat.PNG
    if head[:6] in (b"GIF87a", b"GIF89a"):
        return ImageFormat.GIF
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return ImageFormat.WEBP
    if head[:4] in (b"II*\x00", b"MM\x00*"):
        return ImageFormat.TIFF
    if head[4:8] == b"ftyp":
        brand = head[8:12]
        if brand in _AVIF_BRANDS:
            return ImageFormat.AVIF
        if brand in _HEIF_BRANDS:
            return ImageFormat.HEIF
        return None
    text = head.lstrip(b"\xef\xbb\xbf \t\r\n").lower()
    if text.startswith(b"<") and b"<svg" in text:
        return ImageFormat.SVG
    return None


__all__ = [
    "DEFAULT_INPUT_FORMATS",
    "DEFAULT_OUTPUT_FORMATS",
    "FitPolicy",
    "ImageFormat",
    "extension_of",
    "sniff_image_format",
]
