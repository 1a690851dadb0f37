"""Domain models for image and archive conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from core.constraint import IMAGE_DOWNLOAD_STEM

from .formats import FitPolicy, ImageFormat


class FailurePolicy(str, Enum):
    STRICT = "strict"
    ISOLATE = "isolate"


@dataclass(slots=True)
class ConversionOptions:
    """Target format and resize parameters shared by every converted image."""

    output_format: ImageFormat
    quality: int | None = None
    width: int | None = None
    height: int | None = None
    fit: FitPolicy | None = None

    def resolved(self, default_quality: int = 80, default_fit: FitPolicy = FitPolicy.CONTAIN) -> "ConversionOptions":
        return ConversionOptions(
            output_format=self.output_format,
            quality=self.quality or default_quality,
            width=self.width or None,
            height=self.height or None,
            fit=self.fit or default_fit,
        )

    @property
    def resizes(self) -> bool:
        return bool(self.width or self.height)


@dataclass(slots=True)
class EntryFailure:
    entry_name: str
    code: str
    message: str


@dataclass(slots=True)
class TranscodeReport:
    """Per-archive counters for a transcode run."""

    total: int = 0
    directories: int = 0
    converted: int = 0
    passthrough: int = 0
    failures: list[EntryFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def as_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "directories": self.directories,
            "converted": self.converted,
            "passthrough": self.passthrough,
            "failed": self.failed,
        }


@dataclass(slots=True)
class TranscodeResult:
    data: bytes
    report: TranscodeReport


@dataclass(slots=True)
class ImageResult:
    data: bytes
    input_format: ImageFormat
    output_format: ImageFormat

    @property
    def filename(self) -> str:
        return f"{IMAGE_DOWNLOAD_STEM}.{self.output_format.value}"


__all__ = [
    "ConversionOptions",
    "EntryFailure",
    "FailurePolicy",
    "ImageResult",
    "TranscodeReport",
    "TranscodeResult",
]
