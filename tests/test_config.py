import json
from pathlib import Path

import pytest

from core.image_converter.config import AppConfig, dump_config, load_config
from core.image_converter.formats import FitPolicy, ImageFormat
from core.image_converter.models import FailurePolicy


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config.runtime.max_image_bytes == 5_000_000
    assert config.conversion.default_quality == 80
    assert config.conversion.default_fit is FitPolicy.CONTAIN
    assert config.output_formats == ("jpeg", "png", "webp", "avif", "tiff", "heif")
    assert "raw" in config.input_formats


def test_load_config_from_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[runtime]
output_dir = "out"
max_archive_bytes = 1024
enable_local_api = true

[conversion]
default_quality = 65
default_fit = "cover"
failure_policy = "isolate"

[formats]
output = ["png", "WEBP"]
""",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.runtime.output_dir == Path("out")
    assert config.runtime.max_archive_bytes == 1024
    assert config.runtime.enable_local_api is True
    assert config.conversion.default_quality == 65
    assert config.conversion.default_fit is FitPolicy.COVER
    assert config.conversion.failure_policy is FailurePolicy.ISOLATE
    assert config.formats.output == (ImageFormat.PNG, ImageFormat.WEBP)
    assert config.log_path == Path("out") / "log.jsonl"


def test_invalid_default_quality_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[conversion]\ndefault_quality = 101\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_dump_config_round_trips_key_values() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["formats"]["output"] == ["jpeg", "png", "webp", "avif", "tiff", "heif"]
    assert payload["conversion"]["failure_policy"] == "strict"
    assert payload["api"] == {"host": "127.0.0.1", "port": 8000}
