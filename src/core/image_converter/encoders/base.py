from __future__ import annotations

from io import BytesIO
from typing import Any, Protocol

from PIL import Image

from ..errors import CodecError
from ..formats import ImageFormat

FLATTEN_BACKGROUND = (255, 255, 255)


class Encoder(Protocol):
    image_format: ImageFormat

    def encode(self, image: Image.Image, quality: int) -> bytes:  # pragma: no cover - interface
        ...


def flatten_alpha(image: Image.Image, background: tuple[int, int, int] = FLATTEN_BACKGROUND) -> Image.Image:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    if image.mode not in ("RGB", "L", "CMYK"):
        return image.convert("RGB")
    return image


class BasePillowEncoder:
    image_format: ImageFormat
    pil_format: str
    supports_alpha: bool = True

    def __init__(self) -> None:
        Image.init()
        if self.pil_format not in Image.SAVE:
            raise CodecError(
                "UNSUPPORTED_OUTPUT",
                f"Pillow build has no {self.pil_format} encoder",
            )

    def save_options(self, quality: int) -> dict[str, Any]:
        return {"quality": quality}

    def prepare(self, image: Image.Image) -> Image.Image:
        if not self.supports_alpha:
            return flatten_alpha(image)
        if image.mode not in ("RGB", "RGBA", "L", "LA"):
            has_alpha = "transparency" in image.info or image.mode.endswith("A")
            return image.convert("RGBA" if has_alpha else "RGB")
        return image

    def encode(self, image: Image.Image, quality: int) -> bytes:
        prepared = self.prepare(image)
        buffer = BytesIO()
        try:
            prepared.save(buffer, format=self.pil_format, **self.save_options(quality))
        except (OSError, ValueError) as exc:
            raise CodecError(
                "ENCODE_FAILED",
                f"Failed to encode {self.image_format.value}: {exc}",
            ) from exc
        return buffer.getvalue()
