import json
from pathlib import Path

import pytest

from conftest import build_zip, open_image, read_zip
from core.image_converter.config import AppConfig, ConversionDefaults
from core.image_converter.core import ConversionService
from core.image_converter.errors import ArchiveError, CodecError
from core.image_converter.formats import FitPolicy, ImageFormat
from core.image_converter.models import ConversionOptions, FailurePolicy


def read_log(config: AppConfig) -> list[dict]:
    return [json.loads(line) for line in config.log_path.read_text(encoding="utf-8").splitlines()]


def test_convert_image_detects_input_and_logs(config: AppConfig, png_bytes: bytes) -> None:
    service = ConversionService(config)
    result = service.convert_image(png_bytes, ConversionOptions(output_format=ImageFormat.JPEG), source="cat.png")
    assert result.input_format is ImageFormat.PNG
    assert result.filename == "converted_image.jpeg"
    assert open_image(result.data).format == "JPEG"
    [entry] = read_log(config)
    assert entry["kind"] == "image"
    assert entry["status"] == "success"
    assert entry["source"] == "cat.png"
    assert entry["output_format"] == "jpeg"
    assert entry["size_bytes"] == len(png_bytes)


def test_convert_image_rejects_unknown_input(config: AppConfig) -> None:
    service = ConversionService(config)
    with pytest.raises(CodecError) as exc:
        service.convert_image(b"BM not really", ConversionOptions(output_format=ImageFormat.PNG))
    assert exc.value.code == "UNSUPPORTED_INPUT"
    [entry] = read_log(config)
    assert entry["status"] == "failure"
    assert entry["error_code"] == "UNSUPPORTED_INPUT"


def test_convert_archive_logs_report(config: AppConfig, png_bytes: bytes) -> None:
    service = ConversionService(config)
    source = build_zip([("a/b.png", png_bytes), ("a/readme.txt", b"hi")])
    result = service.convert_archive(source, ConversionOptions(output_format=ImageFormat.WEBP))
    assert [name for name, _ in read_zip(result.data)] == ["a/b.webp", "a/readme.txt"]
    [entry] = read_log(config)
    assert entry["kind"] == "archive"
    assert entry["report"]["converted"] == 1
    assert entry["report"]["passthrough"] == 1


def test_convert_archive_failure_is_logged(config: AppConfig) -> None:
    service = ConversionService(config)
    with pytest.raises(ArchiveError):
        service.convert_archive(b"nope", ConversionOptions(output_format=ImageFormat.WEBP))
    [entry] = read_log(config)
    assert entry["error_code"] == "INVALID_ARCHIVE"


def test_configured_failure_policy_is_default(tmp_path: Path, png_bytes: bytes) -> None:
    config = AppConfig(conversion=ConversionDefaults(failure_policy=FailurePolicy.ISOLATE))
    config.runtime.output_dir = tmp_path
    service = ConversionService(config)
    source = build_zip([("ok.png", png_bytes), ("bad.png", b"xx")])
    result = service.convert_archive(source, ConversionOptions(output_format=ImageFormat.PNG))
    assert result.report.failed == 1
    assert read_log(config)[0]["status"] == "partial"
    assert read_log(config)[0]["failed_entries"] == ["bad.png"]
    with pytest.raises(CodecError):
        service.convert_archive(
            source,
            ConversionOptions(output_format=ImageFormat.PNG),
            failure_policy=FailurePolicy.STRICT,
        )


def test_archive_uses_configured_defaults(tmp_path: Path) -> None:
    calls = []

    class Recorder:
        def convert(self, data, input_format, output_format, options):
            calls.append(options)
            return b"out"

    config = AppConfig(conversion=ConversionDefaults(default_quality=42, default_fit=FitPolicy.FILL))
    config.runtime.output_dir = tmp_path
    service = ConversionService(config, converter=Recorder())
    service.convert_archive(build_zip([("a.png", b"raw")]), ConversionOptions(output_format=ImageFormat.WEBP))
    [options] = calls
    assert (options.quality, options.fit) == (42, FitPolicy.FILL)
