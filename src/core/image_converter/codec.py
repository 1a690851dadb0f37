"""Pillow-backed image conversion capability."""

from __future__ import annotations

from io import BytesIO
from typing import Iterable, Protocol

from PIL import Image, UnidentifiedImageError

from .encoders import ensure_heif_support, get_encoder
from .errors import CodecError
from .formats import DEFAULT_OUTPUT_FORMATS, FitPolicy, ImageFormat
from .models import ConversionOptions
from .resize import resize_image

_PALETTE_MODES = {"1", "P", "PA", "I", "I;16", "I;16B", "I;16L", "F", "LAB", "HSV", "YCbCr"}


class ImageConverter(Protocol):
    def convert(
        self,
        data: bytes,
        input_format: ImageFormat,
        output_format: ImageFormat,
        options: ConversionOptions,
    ) -> bytes:  # pragma: no cover - interface
        ...


def _rasterize_svg(data: bytes) -> bytes:
    try:
        import cairosvg
    except (ModuleNotFoundError, OSError) as exc:  # pragma: no cover - import guard
        raise CodecError(
            "MISSING_DEPENDENCY",
            "cairosvg (with the cairo library) is required to rasterise SVG input",
        ) from exc
    try:
        return cairosvg.svg2png(bytestring=data)
    except (SyntaxError, ValueError, OSError) as exc:
        raise CodecError("DECODE_FAILED", f"Unable to rasterise SVG: {exc}") from exc


def _normalize_mode(image: Image.Image) -> Image.Image:
    if image.mode not in _PALETTE_MODES:
        return image
    has_alpha = "transparency" in image.info or image.mode == "PA"
    return image.convert("RGBA" if has_alpha else "RGB")


def decode_image(data: bytes, input_format: ImageFormat) -> Image.Image:
    """Decode *data* into a fully loaded single-frame image."""

    if not data:
        raise CodecError("DECODE_FAILED", f"Empty {input_format.value} payload")
    if input_format is ImageFormat.SVG:
        data = _rasterize_svg(data)
    elif input_format is ImageFormat.HEIF:
        ensure_heif_support()
    try:
        with Image.open(BytesIO(data)) as handle:
            handle.seek(0)
            handle.load()
            image = handle.copy()
    except (UnidentifiedImageError, OSError, ValueError, EOFError, Image.DecompressionBombError) as exc:
        raise CodecError(
            "DECODE_FAILED",
            f"Cannot decode input as {input_format.value}: {exc}",
        ) from exc
    return _normalize_mode(image)


class PillowImageConverter:
    def __init__(
        self,
        output_formats: Iterable[ImageFormat] = DEFAULT_OUTPUT_FORMATS,
        *,
        default_quality: int = 80,
        default_fit: FitPolicy = FitPolicy.CONTAIN,
    ) -> None:
        self._output_formats = frozenset(output_formats)
        self._default_quality = default_quality
        self._default_fit = default_fit

    def convert(
        self,
        data: bytes,
        input_format: ImageFormat,
        output_format: ImageFormat,
        options: ConversionOptions,
    ) -> bytes:
        if output_format not in self._output_formats:
            raise CodecError("UNSUPPORTED_OUTPUT", f"Unsupported output format: {output_format.value}")
        resolved = options.resolved(self._default_quality, self._default_fit)
        encoder = get_encoder(output_format)
        image = decode_image(data, input_format)
        if resolved.resizes:
            image = resize_image(image, resolved.width, resolved.height, resolved.fit or self._default_fit)
        return encoder.encode(image, resolved.quality or self._default_quality)


__all__ = ["ImageConverter", "PillowImageConverter", "decode_image"]
