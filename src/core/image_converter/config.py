from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from .formats import DEFAULT_INPUT_FORMATS, DEFAULT_OUTPUT_FORMATS, FitPolicy, ImageFormat
from .models import FailurePolicy


CONFIG_FILE = Path("config.toml")


@dataclass(slots=True)
class RuntimeConfig:
    output_dir: Path = Path("runs")
    log_file: str = "log.jsonl"
    max_image_bytes: int = 5_000_000
    max_archive_bytes: int = 50_000_000
    enable_local_api: bool = False


@dataclass(slots=True)
class ConversionDefaults:
    default_quality: int = 80
    default_fit: FitPolicy = FitPolicy.CONTAIN
    failure_policy: FailurePolicy = FailurePolicy.STRICT


@dataclass(slots=True)
class FormatConfig:
    input: tuple[ImageFormat, ...] = DEFAULT_INPUT_FORMATS
    output: tuple[ImageFormat, ...] = DEFAULT_OUTPUT_FORMATS


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    conversion: ConversionDefaults = field(default_factory=ConversionDefaults)
    formats: FormatConfig = field(default_factory=FormatConfig)
    api: APIConfig = field(default_factory=APIConfig)

    @property
    def input_formats(self) -> frozenset[str]:
        return frozenset(fmt.value for fmt in self.formats.input)

    @property
    def output_formats(self) -> tuple[str, ...]:
        return tuple(fmt.value for fmt in self.formats.output)

    @property
    def log_path(self) -> Path:
        return self.runtime.output_dir / self.runtime.log_file


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        output_dir=Path(str(data.get("output_dir", "runs"))),
        log_file=str(data.get("log_file", "log.jsonl")),
        max_image_bytes=int(data.get("max_image_bytes", 5_000_000)),
        max_archive_bytes=int(data.get("max_archive_bytes", 50_000_000)),
        enable_local_api=bool(data.get("enable_local_api", False)),
    )


def _build_conversion(data: Mapping[str, object] | None) -> ConversionDefaults:
    if not data:
        return ConversionDefaults()
    quality = int(data.get("default_quality", 80))
    if not 1 <= quality <= 100:
        raise ValueError(f"default_quality must be within 1..100, got {quality}")
    return ConversionDefaults(
        default_quality=quality,
        default_fit=FitPolicy(str(data.get("default_fit", FitPolicy.CONTAIN.value))),
        failure_policy=FailurePolicy(str(data.get("failure_policy", FailurePolicy.STRICT.value))),
    )


def _tuple_of_formats(value: object | None, default: Iterable[ImageFormat]) -> tuple[ImageFormat, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, str):
        return (ImageFormat(value.lower()),)
    if isinstance(value, Iterable):
        return tuple(ImageFormat(str(item).lower()) for item in value)
    raise TypeError(f"Unsupported formats configuration: {value!r}")


def _build_formats(data: Mapping[str, object] | None) -> FormatConfig:
    if not data:
        return FormatConfig()
    return FormatConfig(
        input=_tuple_of_formats(data.get("input"), DEFAULT_INPUT_FORMATS),
        output=_tuple_of_formats(data.get("output"), DEFAULT_OUTPUT_FORMATS),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    value = raw.get(name)
    return value if isinstance(value, Mapping) else None


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    return AppConfig(
        runtime=_build_runtime(_section(raw, "runtime")),
        conversion=_build_conversion(_section(raw, "conversion")),
        formats=_build_formats(_section(raw, "formats")),
        api=_build_api(_section(raw, "api")),
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "output_dir": str(config.runtime.output_dir),
            "log_file": config.runtime.log_file,
            "max_image_bytes": config.runtime.max_image_bytes,
            "max_archive_bytes": config.runtime.max_archive_bytes,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "conversion": {
            "default_quality": config.conversion.default_quality,
            "default_fit": config.conversion.default_fit.value,
            "failure_policy": config.conversion.failure_policy.value,
        },
        "formats": {
            "input": sorted(config.input_formats),
            "output": list(config.output_formats),
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
