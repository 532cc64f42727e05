"""
Image resize — controller layer.

Receives raw query values from the router, calls the orchestrator, and turns
its result into an HTTP response or a preset HTTP exception. Thin glue layer
between HTTP and the pipeline.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from fastapi import Response

from resizer.exceptions import ImageNotFound, ImageProcessingFailed, InvalidResizeRequest
from resizer.resize.result import Err
from resizer.resize.schemas import ErrorKind, ImageResult, ResizeFailure

if TYPE_CHECKING:
    from resizer.resize.result import Result
    from resizer.resize.service import ResizeOrchestrator


def _raise_for(failure: ResizeFailure) -> None:
    if failure.kind == ErrorKind.BAD_REQUEST:
        raise InvalidResizeRequest(failure.code or "BadRequest", failure.message)
    if failure.kind == ErrorKind.SOURCE_NOT_FOUND:
        raise ImageNotFound()
    raise ImageProcessingFailed()


def _respond(result: Result[ImageResult, ResizeFailure]) -> Response:
    if isinstance(result, Err):
        _raise_for(result.error)
    image = result.value
    headers = {}
    if image.cache_control:
        headers["Cache-Control"] = image.cache_control
    return Response(content=image.body, media_type=image.content_type, headers=headers)


def resize_image(
    orchestrator: ResizeOrchestrator,
    image: str | None,
    params: Mapping[str, str | None],
) -> Response:
    return _respond(orchestrator.resize(image, params))


def original_image(orchestrator: ResizeOrchestrator, image: str | None) -> Response:
    return _respond(orchestrator.original(image))
