from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.dependencies import get_config, get_service
from api.schemas import (
    ArchiveConversionForm,
    ImageConversionForm,
    read_form,
    validation_context,
    validation_errors,
)
from api.utils import run_blocking
from core.constraint import ARCHIVE_DOWNLOAD_NAME
from core.image_converter.config import AppConfig
from core.image_converter.core import ConversionError, ConversionService

router = APIRouter(prefix="/api", tags=["conversion"])


@router.post("/image-converter", summary="Convert a single image")
async def convert_image(
    request: Request,
    service: ConversionService = Depends(get_service),
    config: AppConfig = Depends(get_config),
) -> Response:
    fields, filenames = await read_form(request)
    try:
        form = ImageConversionForm.model_validate(
            fields, context=validation_context(config, config.runtime.max_image_bytes)
        )
    except ValidationError as exc:
        return JSONResponse(status_code=400, content=validation_errors(exc))

    try:
        result = await run_blocking(
            service.convert_image,
            form.image,
            form.to_options(),
            source=filenames.get("image", "upload"),
        )
    except ConversionError as exc:
        return JSONResponse(status_code=500, content={"message": str(exc), "code": exc.code})
    return Response(
        content=result.data,
        media_type=result.output_format.content_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.post("/folder-images-converter", summary="Convert every image inside a ZIP archive")
async def convert_archive(
    request: Request,
    service: ConversionService = Depends(get_service),
    config: AppConfig = Depends(get_config),
) -> Response:
    fields, filenames = await read_form(request)
    try:
        form = ArchiveConversionForm.model_validate(
            fields, context=validation_context(config, config.runtime.max_archive_bytes)
        )
    except ValidationError as exc:
        return JSONResponse(status_code=400, content=validation_errors(exc))

    try:
        result = await run_blocking(
            service.convert_archive,
            form.compacted,
            form.to_options(),
            failure_policy=form.failure_policy,
            source=filenames.get("compacted", "upload"),
        )
    except ConversionError as exc:
        return JSONResponse(status_code=500, content={"error": "Error processing images", "code": exc.code})
    return Response(
        content=result.data,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{ARCHIVE_DOWNLOAD_NAME}"',
            "X-Converted-Entries": str(result.report.converted),
            "X-Failed-Entries": str(result.report.failed),
        },
    )


__all__ = ["router"]
