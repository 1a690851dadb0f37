"""ZIP-to-ZIP batch image transcoding."""

from __future__ import annotations

import posixpath
import zlib
from io import BytesIO
from typing import Iterable
from zipfile import ZIP_DEFLATED, ZIP_STORED, BadZipFile, ZipFile, ZipInfo

from .codec import ImageConverter
from .errors import ArchiveError, CodecError
from .formats import DEFAULT_INPUT_FORMATS, FitPolicy, ImageFormat, extension_of
from .models import ConversionOptions, EntryFailure, FailurePolicy, TranscodeReport, TranscodeResult

DIRECTORY_ATTR = (0o40775 << 16) | 0x10


def converted_entry_name(entry_name: str, output_format: ImageFormat) -> str:
    """Same directory, same stem, new extension."""

    directory, leaf = posixpath.split(entry_name)
    stem = leaf.rpartition(".")[0] or leaf
    new_leaf = f"{stem}.{output_format.value}"
    return f"{directory}/{new_leaf}" if directory else new_leaf


def _open_archive(source: bytes) -> ZipFile:
    try:
        return ZipFile(BytesIO(source))
    except (BadZipFile, ValueError, EOFError, OSError) as exc:
        raise ArchiveError("INVALID_ARCHIVE", f"Not a valid ZIP archive: {exc}") from exc


def _clone_info(info: ZipInfo, name: str | None = None) -> ZipInfo:
    clone = ZipInfo(name or info.filename, date_time=info.date_time)
    clone.external_attr = info.external_attr
    clone.create_system = info.create_system
    clone.comment = info.comment
    clone.compress_type = ZIP_STORED if info.is_dir() else ZIP_DEFLATED
    return clone


class ArchiveTranscoder:
    def __init__(
        self,
        converter: ImageConverter,
        input_formats: Iterable[str] = tuple(fmt.value for fmt in DEFAULT_INPUT_FORMATS),
        *,
        default_quality: int = 80,
        default_fit: FitPolicy = FitPolicy.CONTAIN,
    ) -> None:
        self._converter = converter
        self._input_formats = frozenset(input_formats)
        self._default_quality = default_quality
        self._default_fit = default_fit

    def is_convertible(self, entry_name: str) -> bool:
        return extension_of(entry_name) in self._input_formats

    def transcode(
        self,
        source: bytes,
        options: ConversionOptions,
        *,
        failure_policy: FailurePolicy = FailurePolicy.STRICT,
    ) -> TranscodeResult:
        resolved = options.resolved(self._default_quality, self._default_fit)
        report = TranscodeReport()
        buffer = BytesIO()
        with _open_archive(source) as archive, ZipFile(buffer, "w", compression=ZIP_DEFLATED) as output:
            for info in archive.infolist():
                report.total += 1
                if info.is_dir():
                    directory = _clone_info(info)
                    if not directory.external_attr:
                        directory.external_attr = DIRECTORY_ATTR
                    output.writestr(directory, b"")
                    report.directories += 1
                    continue

                payload = self._read_entry(archive, info)
                if not self.is_convertible(info.filename):
                    output.writestr(_clone_info(info), payload)
                    report.passthrough += 1
                    continue

                input_format = ImageFormat(extension_of(info.filename))
                try:
                    converted = self._converter.convert(payload, input_format, resolved.output_format, resolved)
                except CodecError as exc:
                    if failure_policy is FailurePolicy.STRICT:
                        raise
                    report.failures.append(EntryFailure(entry_name=info.filename, code=exc.code, message=str(exc)))
                    output.writestr(_clone_info(info), payload)
                    continue

                new_name = converted_entry_name(info.filename, resolved.output_format)
                output.writestr(_clone_info(info, new_name), converted)
                report.converted += 1
        return TranscodeResult(data=buffer.getvalue(), report=report)

    def _read_entry(self, archive: ZipFile, info: ZipInfo) -> bytes:
        try:
            return archive.read(info)
        except (BadZipFile, NotImplementedError, zlib.error, EOFError, OSError) as exc:
            raise ArchiveError("CORRUPT_ENTRY", f"Cannot read entry {info.filename}: {exc}") from exc
        except RuntimeError as exc:
            # password-protected members surface as RuntimeError
            raise ArchiveError("CORRUPT_ENTRY", f"Entry {info.filename} is encrypted") from exc


__all__ = ["ArchiveTranscoder", "converted_entry_name"]
