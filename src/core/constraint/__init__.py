from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config.toml")
ENV_PREFIX = "IMC_"

ARCHIVE_DOWNLOAD_NAME = "converted_images.zip"
IMAGE_DOWNLOAD_STEM = "converted_image"

__all__ = ["ARCHIVE_DOWNLOAD_NAME", "DEFAULT_CONFIG_PATH", "ENV_PREFIX", "IMAGE_DOWNLOAD_STEM"]
