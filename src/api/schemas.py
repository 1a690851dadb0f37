"""Typed multipart request models for the conversion endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, ValidationInfo, field_validator
from starlette.datastructures import UploadFile

from core.image_converter.config import AppConfig
from core.image_converter.formats import FitPolicy, ImageFormat
from core.image_converter.models import ConversionOptions, FailurePolicy


class ConversionForm(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    output_format: ImageFormat = Field(alias="outputFormat")
    quality: int | None = Field(default=None, ge=1, le=100)
    width: PositiveInt | None = None
    height: PositiveInt | None = None
    fit: FitPolicy | None = None

    @field_validator("quality", "width", "height", "fit", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("output_format")
    @classmethod
    def _supported_output(cls, value: ImageFormat, info: ValidationInfo) -> ImageFormat:
        allowed = (info.context or {}).get("output_formats")
        if allowed is not None and value.value not in allowed:
            raise ValueError(f"Output format must be one of: {', '.join(allowed)}")
        return value

    def to_options(self) -> ConversionOptions:
        return ConversionOptions(
            output_format=self.output_format,
            quality=self.quality,
            width=self.width,
            height=self.height,
            fit=self.fit,
        )


def _check_upload(value: Any, info: ValidationInfo) -> bytes:
    if not isinstance(value, bytes):
        raise ValueError("Expected an uploaded file")
    max_bytes = (info.context or {}).get("max_bytes")
    if max_bytes is not None and len(value) > max_bytes:
        raise ValueError(f"File must be at most {max_bytes} bytes")
    return value


class ImageConversionForm(ConversionForm):
    image: bytes

    @field_validator("image", mode="before")
    @classmethod
    def _image_upload(cls, value: Any, info: ValidationInfo) -> bytes:
        return _check_upload(value, info)


class ArchiveConversionForm(ConversionForm):
    compacted: bytes
    failure_policy: FailurePolicy | None = Field(default=None, alias="failurePolicy")

    @field_validator("compacted", mode="before")
    @classmethod
    def _archive_upload(cls, value: Any, info: ValidationInfo) -> bytes:
        return _check_upload(value, info)

    @field_validator("failure_policy", mode="before")
    @classmethod
    def _blank_policy(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


async def read_form(request: Request) -> tuple[dict[str, Any], dict[str, str]]:
    """Collect multipart fields; repeated keys become lists and fail validation."""

    fields: dict[str, Any] = {}
    filenames: dict[str, str] = {}
    form = await request.form()
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            filenames[key] = value.filename or "upload"
            value = await value.read()
        if key in fields:
            existing = fields[key]
            fields[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            fields[key] = value
    return fields, filenames


def validation_context(config: AppConfig, max_bytes: int) -> dict[str, Any]:
    return {"output_formats": config.output_formats, "max_bytes": max_bytes}


def validation_errors(exc: ValidationError) -> dict[str, Any]:
    return {
        "message": "Invalid input data",
        "errors": [{"path": list(error["loc"]), "message": error["msg"]} for error in exc.errors()],
    }


__all__ = [
    "ArchiveConversionForm",
    "ConversionForm",
    "ImageConversionForm",
    "read_form",
    "validation_context",
    "validation_errors",
]
