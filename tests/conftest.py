from __future__ import annotations

from io import BytesIO
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

import pytest
from PIL import Image

from core.image_converter.config import AppConfig, RuntimeConfig


def make_image_bytes(
    fmt: str = "PNG",
    size: tuple[int, int] = (200, 100),
    mode: str = "RGB",
    color: tuple[int, ...] = (200, 30, 30),
) -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def build_zip(entries: list[tuple[str, bytes | None]]) -> bytes:
    """Entries with ``None`` content are written as directory markers."""

    buffer = BytesIO()
    with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
        for name, content in entries:
            info = ZipInfo(name, date_time=(2024, 1, 1, 0, 0, 0))
            if content is None:
                info.external_attr = (0o40755 << 16) | 0x10
                archive.writestr(info, b"")
            else:
                info.compress_type = ZIP_DEFLATED
                archive.writestr(info, content)
    return buffer.getvalue()


def read_zip(data: bytes) -> list[tuple[str, bytes]]:
    with ZipFile(BytesIO(data)) as archive:
        return [(info.filename, archive.read(info)) for info in archive.infolist()]


def open_image(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image


def build_config(output_dir: Path) -> AppConfig:
    runtime = RuntimeConfig(output_dir=output_dir, enable_local_api=True)
    return AppConfig(runtime=runtime)


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return build_config(tmp_path / "runs")


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")
