"""
Source path normalisation and derived (cache) key construction.

Layout of a derived object, relative to the same hierarchy as its source:

    {source_dir}/{width}x{height}[/{fit}]/{filename}

A missing dimension is written as ``auto``. Sources at the bucket root have no
``{source_dir}/`` prefix.
"""
from __future__ import annotations

import posixpath
from dataclasses import dataclass

from resizer.resize.constants import AUTO_DIMENSION, NO_WATERMARK_SUFFIX
from resizer.resize.result import Err, Ok, Result
from resizer.resize.schemas import TransformSpec, ValidationCode, ValidationError


@dataclass(frozen=True)
class SourceRef:
    """A normalised, traversal-free object key in the source bucket."""
    key: str

    @property
    def dirname(self) -> str:
        return posixpath.dirname(self.key)

    @property
    def basename(self) -> str:
        return posixpath.basename(self.key)


def normalize_source_path(raw: str | None) -> Result[SourceRef, ValidationError]:
    if raw is None or raw.strip() == "":
        return Err(ValidationError(
            code=ValidationCode.IMAGE_PATH_REQUIRED,
            message="Image path is required",
        ))

    path = raw.strip().replace("\\", "/")
    if "\x00" in path:
        return Err(_invalid_path())

    normalized = posixpath.normpath(path.lstrip("/"))
    if normalized in (".", "") or normalized == ".." or normalized.startswith("../"):
        return Err(_invalid_path())
    return Ok(SourceRef(normalized))


def _invalid_path() -> ValidationError:
    return ValidationError(
        code=ValidationCode.INVALID_IMAGE_PATH,
        message="Image path must be a relative path inside the source bucket",
    )


def dimension_segment(spec: TransformSpec) -> str:
    width = spec.width if spec.width is not None else AUTO_DIMENSION
    height = spec.height if spec.height is not None else AUTO_DIMENSION
    return f"{width}x{height}"


def derive_key(
    source: SourceRef,
    spec: TransformSpec,
    *,
    include_fit: bool = True,
    watermark_opt_out: bool = False,
) -> str:
    """Derived storage key for ``source`` rendered with ``spec``.

    Pure and deterministic: the same inputs always map to the same slot.
    """
    segment = dimension_segment(spec)
    if watermark_opt_out:
        segment += NO_WATERMARK_SUFFIX

    parts = [source.dirname] if source.dirname else []
    parts.append(segment)
    if include_fit:
        parts.append(spec.fit.value)
    parts.append(source.basename)
    return "/".join(parts)
