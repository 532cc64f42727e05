"""
Image resize — Pydantic V2 value types passed through the pipeline.
"""
from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from resizer.resize.constants import DEFAULT_FIT, FitMode


# ── Base ─────────────────────────────────────────────────────────────────────

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ── Geometry ─────────────────────────────────────────────────────────────────

class TransformSpec(_Frozen):
    """Canonical, validated geometry for one transform."""
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    fit: FitMode = DEFAULT_FIT

    @model_validator(mode="after")
    def _require_a_dimension(self) -> TransformSpec:
        if self.width is None and self.height is None:
            raise ValueError("At least one of width or height must be set")
        return self


class WatermarkSpec(_Frozen):
    asset_key: str
    width_fraction: float = Field(default=0.10, gt=0, le=1)
    min_width: int = Field(default=50, gt=0)
    margin: int = Field(default=10, ge=0)


# ── Errors ───────────────────────────────────────────────────────────────────

class ValidationCode(str, enum.Enum):
    INVALID_FIT = "InvalidFit"
    CONFLICTING_DIMENSION_PARAMS = "ConflictingDimensionParams"
    UNKNOWN_PRESET_SIZE = "UnknownPresetSize"
    INVALID_DIMENSIONS = "InvalidDimensions"
    IMAGE_PATH_REQUIRED = "ImagePathRequired"
    INVALID_IMAGE_PATH = "InvalidImagePath"


class ValidationError(_Frozen):
    """Client-facing parameter problem, detected before any store access."""
    code: ValidationCode
    message: str


class ErrorKind(str, enum.Enum):
    BAD_REQUEST = "BadRequest"
    SOURCE_NOT_FOUND = "SourceNotFound"
    INTERNAL_ERROR = "InternalError"


class ResizeFailure(_Frozen):
    kind: ErrorKind
    message: str
    code: str | None = None


# ── Results ──────────────────────────────────────────────────────────────────

class ImageResult(_Frozen):
    body: bytes
    content_type: str
    cache_control: str | None = None
    cache_hit: bool = False
    key: str
