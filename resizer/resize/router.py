"""
Image resize — HTTP routes.

Public endpoints (no auth) used directly by ``<img>`` tags. Query values are
passed through as raw strings: the geometry resolver owns validation so the
error codes stay the same behind FastAPI and behind the Lambda handler.

The endpoints are plain ``def``: store I/O is blocking boto3 and FastAPI runs
them in its threadpool.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from resizer.resize import controller
from resizer.resize.dependencies import get_orchestrator
from resizer.resize.service import ResizeOrchestrator

router = APIRouter(prefix="/images", tags=["images"])

_IMAGE_RESPONSES = {
    200: {"content": {"image/jpeg": {}}, "description": "Image bytes"},
    400: {"description": "Invalid image path or geometry parameters"},
    404: {"description": "Source image not found"},
    500: {"description": "Internal server error"},
}


@router.get(
    "/resize",
    summary="Resize an image (cached)",
    description=(
        "Returns the source image resized to a named preset size or to explicit "
        "width/height with the requested fit mode. The first request computes "
        "and stores the result; later identical requests are served from storage."
    ),
    response_class=Response,
    responses=_IMAGE_RESPONSES,
)
def resize_image(
    image: str | None = Query(default=None, description="Path of the source image"),
    size: str | None = Query(
        default=None, description="Preset: tiny, small, medium, large, extra-large",
    ),
    width: str | None = Query(default=None, description="Target width in pixels"),
    height: str | None = Query(default=None, description="Target height in pixels"),
    fit: str | None = Query(
        default=None, description="cover (default), contain, fill, inside, outside",
    ),
    watermark: str | None = Query(default=None, description="Set to false to skip the watermark"),
    orchestrator: ResizeOrchestrator = Depends(get_orchestrator),
) -> Response:
    params = {
        "size": size,
        "width": width,
        "height": height,
        "fit": fit,
        "watermark": watermark,
    }
    return controller.resize_image(orchestrator, image, params)


@router.get(
    "/original",
    summary="Serve the original image",
    description="Returns the stored source bytes verbatim. No transform, no cache.",
    response_class=Response,
    responses=_IMAGE_RESPONSES,
)
def original_image(
    image: str | None = Query(default=None, description="Path of the source image"),
    orchestrator: ResizeOrchestrator = Depends(get_orchestrator),
) -> Response:
    return controller.original_image(orchestrator, image)
