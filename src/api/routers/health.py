from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_config
from core.image_converter.config import AppConfig

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
def health(config: AppConfig = Depends(get_config)) -> dict[str, object]:
    return {
        "status": "ok",
        "input_formats": sorted(config.input_formats),
        "output_formats": list(config.output_formats),
    }


__all__ = ["router"]
