"""
AWS Lambda handler — on-demand image resize behind API Gateway (proxy integration).

Routes (last path segment):
  .../original   return the source object verbatim
  anything else  resize (cached) — the function normally backs a single /resize route

Query string:
  image, size | width & height, fit, watermark

Environment variables: see ``resizer.config.Settings`` (SOURCE_BUCKET,
RESIZED_BUCKET, WATERMARK_KEY, ...). Read once per cold start.
"""
from __future__ import annotations

import base64
import functools
import json
import logging

from resizer.config import Settings
from resizer.resize.dependencies import build_orchestrator
from resizer.resize.result import Err
from resizer.resize.schemas import ErrorKind
from resizer.resize.service import ResizeOrchestrator

logger = logging.getLogger()
logger.setLevel(logging.INFO)

_STATUS_CODES = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.SOURCE_NOT_FOUND: 404,
    ErrorKind.INTERNAL_ERROR: 500,
}


@functools.lru_cache(maxsize=1)
def get_orchestrator() -> ResizeOrchestrator:
    return build_orchestrator(Settings())


def handler(event: dict, context: object) -> dict:
    """Lambda entry point — resolves or computes one image per invocation."""
    params = event.get("queryStringParameters") or {}
    route = _route(event)

    try:
        orchestrator = get_orchestrator()
        if route == "original":
            result = orchestrator.original(params.get("image"))
        else:
            result = orchestrator.resize(params.get("image"), params)
    except Exception:
        logger.exception("Unhandled error for %s %s", route, params)
        return _error_response(500, "Internal server error")

    if isinstance(result, Err):
        failure = result.error
        return _error_response(_STATUS_CODES[failure.kind], failure.message, failure.code)

    image = result.value
    headers = {"Content-Type": image.content_type}
    if image.cache_control:
        headers["Cache-Control"] = image.cache_control
    return {
        "statusCode": 200,
        "headers": headers,
        "body": base64.b64encode(image.body).decode("ascii"),
        "isBase64Encoded": True,
    }


def _route(event: dict) -> str:
    path = event.get("path") or event.get("rawPath") or ""
    return path.rstrip("/").rsplit("/", 1)[-1].lower()


def _error_response(status_code: int, message: str, code: str | None = None) -> dict:
    body = {"error": message}
    if code:
        body["code"] = code
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }
