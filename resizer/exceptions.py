"""
Image resizer — error types.

Two families live here:

* collaborator errors (``ObjectNotFound``, ``StoreError``, ``TransformError``,
  ``WatermarkError``) raised by the storage gateway, the Pillow engine and the
  watermark compositor. The orchestrator catches them at a single seam and
  turns them into ``Err`` results.
* HTTP exceptions with preset status codes and detail messages so that callers
  never need to specify these at the call site. The error envelope handler in
  ``resizer.middleware`` wraps them in the standard error body.
"""
from fastapi import HTTPException, status


# ── Storage ──────────────────────────────────────────────────────────────────

class StoreError(Exception):
    """Any object store failure other than a missing key."""

    def __init__(self, bucket: str, key: str, reason: str = "") -> None:
        self.bucket = bucket
        self.key = key
        self.reason = reason
        super().__init__(f"Store failure for s3://{bucket}/{key}: {reason}")


class ObjectNotFound(StoreError):
    """The requested key does not exist in the bucket."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(bucket, key, "not found")


# ── Pixel processing ─────────────────────────────────────────────────────────

class TransformError(Exception):
    """The image could not be decoded, resized or encoded."""


class WatermarkError(Exception):
    """The watermark asset could not be fetched or composited."""


# ── HTTP ─────────────────────────────────────────────────────────────────────

class InvalidResizeRequest(HTTPException):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": code, "message": message},
        )


class ImageNotFound(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "SourceNotFound", "message": "Original image not found"},
        )


class ImageProcessingFailed(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": "InternalError", "message": "Internal server error"},
        )
