from __future__ import annotations

import time
from dataclasses import dataclass

from .archive import ArchiveTranscoder
from .codec import ImageConverter, PillowImageConverter
from .config import AppConfig
from .errors import ArchiveError, CodecError, ConversionError
from .formats import ImageFormat, sniff_image_format
from .logging import RequestLogEntry, RequestLogger, StageTimings
from .models import ConversionOptions, FailurePolicy, ImageResult, TranscodeReport, TranscodeResult
from .utils import elapsed_ms, generate_request_id


@dataclass(slots=True)
class _RequestContext:
    request_id: str
    kind: str
    source: str
    options: ConversionOptions
    size_bytes: int
    start: float


class ConversionService:
    def __init__(self, config: AppConfig, converter: ImageConverter | None = None) -> None:
        self._config = config
        self._converter = converter or PillowImageConverter(
            config.formats.output,
            default_quality=config.conversion.default_quality,
            default_fit=config.conversion.default_fit,
        )
        self._transcoder = ArchiveTranscoder(
            self._converter,
            config.input_formats,
            default_quality=config.conversion.default_quality,
            default_fit=config.conversion.default_fit,
        )
        self._logger = RequestLogger(config.log_path)

    def convert_image(
        self,
        data: bytes,
        options: ConversionOptions,
        *,
        source: str = "upload",
        request_id: str | None = None,
    ) -> ImageResult:
        context = self._build_context("image", source, options, data, request_id)
        try:
            read_start = time.perf_counter()
            input_format = self._detect_input(data)
            read_elapsed = elapsed_ms(read_start)
            convert_start = time.perf_counter()
            converted = self._converter.convert(data, input_format, options.output_format, self._resolve(options))
            convert_elapsed = elapsed_ms(convert_start)
        except ConversionError as exc:
            self._log_failure(context, exc)
            raise
        self._log_success(
            context,
            StageTimings(read_ms=read_elapsed, convert_ms=convert_elapsed),
            TranscodeReport(total=1, converted=1),
        )
        return ImageResult(data=converted, input_format=input_format, output_format=options.output_format)

    def convert_archive(
        self,
        data: bytes,
        options: ConversionOptions,
        *,
        failure_policy: FailurePolicy | None = None,
        source: str = "upload",
        request_id: str | None = None,
    ) -> TranscodeResult:
        context = self._build_context("archive", source, options, data, request_id)
        policy = failure_policy or self._config.conversion.failure_policy
        convert_start = time.perf_counter()
        try:
            result = self._transcoder.transcode(data, options, failure_policy=policy)
        except ConversionError as exc:
            self._log_failure(context, exc)
            raise
        self._log_success(context, StageTimings(convert_ms=elapsed_ms(convert_start)), result.report)
        return result

    def _resolve(self, options: ConversionOptions) -> ConversionOptions:
        return options.resolved(self._config.conversion.default_quality, self._config.conversion.default_fit)

    def _detect_input(self, data: bytes) -> ImageFormat:
        detected = sniff_image_format(data)
        if detected is None or detected.value not in self._config.input_formats:
            raise CodecError("UNSUPPORTED_INPUT", "Unsupported or undetectable input format")
        return detected

    def _build_context(
        self,
        kind: str,
        source: str,
        options: ConversionOptions,
        data: bytes,
        request_id: str | None,
    ) -> _RequestContext:
        return _RequestContext(
            request_id=request_id or generate_request_id(kind),
            kind=kind,
            source=source,
            options=options,
            size_bytes=len(data),
            start=time.perf_counter(),
        )

    def _log_success(self, context: _RequestContext, timings: StageTimings, report: TranscodeReport) -> None:
        self._logger.append(
            RequestLogEntry(
                request_id=context.request_id,
                kind=context.kind,
                source=context.source,
                status="success" if not report.failures else "partial",
                output_format=context.options.output_format.value,
                error_code=None,
                timings=timings,
                size_bytes=context.size_bytes,
                report=report.as_dict(),
                failed_entries=[failure.entry_name for failure in report.failures],
            )
        )

    def _log_failure(self, context: _RequestContext, exc: ConversionError) -> None:
        self._logger.append(
            RequestLogEntry(
                request_id=context.request_id,
                kind=context.kind,
                source=context.source,
                status="failure",
                output_format=context.options.output_format.value,
                error_code=exc.code,
                timings=StageTimings(convert_ms=elapsed_ms(context.start)),
                size_bytes=context.size_bytes,
            )
        )


__all__ = [
    "ArchiveError",
    "CodecError",
    "ConversionError",
    "ConversionService",
]
