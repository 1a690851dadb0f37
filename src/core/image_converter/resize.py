from __future__ import annotations

from PIL import Image, ImageOps

from .formats import FitPolicy

RESAMPLE = Image.Resampling.LANCZOS


def _infer_box(size: tuple[int, int], width: int | None, height: int | None) -> tuple[int, int]:
    src_w, src_h = size
    if width and height:
        return width, height
    if width:
        return width, max(1, round(src_h * width / src_w))
    if height:
        return max(1, round(src_w * height / src_h)), height
    return size


def _scaled(size: tuple[int, int], factor: float) -> tuple[int, int]:
    return max(1, round(size[0] * factor)), max(1, round(size[1] * factor))


def _letterbox_color(image: Image.Image) -> tuple[int, ...] | int:
    if image.mode in ("RGBA", "LA"):
        return (0, 0, 0, 255) if image.mode == "RGBA" else (0, 255)
    if image.mode == "RGB":
        return (0, 0, 0)
    return 0


def resize_image(
    image: Image.Image,
    width: int | None,
    height: int | None,
    fit: FitPolicy = FitPolicy.CONTAIN,
) -> Image.Image:
    """Resize *image* into the target box according to *fit*.

    With a single dimension the other one follows the source aspect ratio and
    every policy reduces to a plain proportional scale.
    """

    if not width and not height:
        return image
    box = _infer_box(image.size, width, height)
    if not (width and height) or fit is FitPolicy.FILL:
        return image.resize(box, RESAMPLE)

    src_w, src_h = image.size
    if fit is FitPolicy.COVER:
        return ImageOps.fit(image, box, method=RESAMPLE, centering=(0.5, 0.5))
    if fit is FitPolicy.CONTAIN:
        if image.mode not in ("RGB", "RGBA", "L", "LA"):
            image = image.convert("RGBA")
        return ImageOps.pad(image, box, method=RESAMPLE, color=_letterbox_color(image), centering=(0.5, 0.5))
    if fit is FitPolicy.INSIDE:
        factor = min(box[0] / src_w, box[1] / src_h)
    else:
        factor = max(box[0] / src_w, box[1] / src_h)
    target = _scaled(image.size, factor)
    if fit is FitPolicy.INSIDE:
        target = (min(target[0], box[0]), min(target[1], box[1]))
    else:
        target = (max(target[0], box[0]), max(target[1], box[1]))
    if target == image.size:
        return image
    return image.resize(target, RESAMPLE)


__all__ = ["resize_image"]
