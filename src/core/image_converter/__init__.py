"""Image and ZIP-archive format conversion toolkit."""

from .archive import ArchiveTranscoder
from .config import AppConfig, load_config
from .core import ConversionService
from .errors import ArchiveError, CodecError, ConversionError
from .formats import FitPolicy, ImageFormat
from .models import ConversionOptions, FailurePolicy, TranscodeReport, TranscodeResult

__all__ = [
    "AppConfig",
    "ArchiveError",
    "ArchiveTranscoder",
    "CodecError",
    "ConversionError",
    "ConversionOptions",
    "ConversionService",
    "FailurePolicy",
    "FitPolicy",
    "ImageFormat",
    "TranscodeReport",
    "TranscodeResult",
    "load_config",
]
