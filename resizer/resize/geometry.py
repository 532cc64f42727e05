"""
Geometry resolution — raw request parameters to a ``TransformSpec``.

Rules are applied in a fixed order: fit first, then the size/dimension
conflict, then the preset lookup or the explicit dimensions, and finally the
default preset. Nothing here touches storage.
"""
from __future__ import annotations

from collections.abc import Mapping

from resizer.resize.constants import DEFAULT_FIT, DEFAULT_PRESET, MAX_DIMENSION, FitMode
from resizer.resize.result import Err, Ok, Result
from resizer.resize.schemas import TransformSpec, ValidationCode, ValidationError

_FIT_CHOICES = ", ".join(f.value for f in FitMode)


def _present(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def _positive_int(value: str | None) -> int | None:
    """Parse a positive base-10 integer; anything else counts as absent."""
    if not _present(value):
        return None
    digits = value.strip()
    # int() alone also takes "+5", "1_0" and non-ASCII digits
    if not (digits.isascii() and digits.isdigit()):
        return None
    parsed = int(digits, 10)
    return parsed if parsed > 0 else None


class GeometryResolver:
    """Turns a parameter bag into a canonical ``TransformSpec``.

    The preset table is injected so alternate tables can be used (tests,
    deployments with different house sizes).
    """

    def __init__(
        self,
        presets: Mapping[str, tuple[int, int]],
        default_preset: str = DEFAULT_PRESET,
        max_dimension: int = MAX_DIMENSION,
    ) -> None:
        if default_preset not in presets:
            raise ValueError(f"Default preset {default_preset!r} missing from preset table")
        self._presets = dict(presets)
        self._default_preset = default_preset
        self._max_dimension = max_dimension

    def resolve(self, params: Mapping[str, str | None]) -> Result[TransformSpec, ValidationError]:
        size = params.get("size")
        width = params.get("width")
        height = params.get("height")

        fit = self._resolve_fit(params.get("fit"))
        if fit is None:
            return Err(ValidationError(
                code=ValidationCode.INVALID_FIT,
                message=f"Invalid fit option. Must be one of: {_FIT_CHOICES}",
            ))

        if _present(size) and (_present(width) or _present(height)):
            return Err(ValidationError(
                code=ValidationCode.CONFLICTING_DIMENSION_PARAMS,
                message="Cannot specify both size and dimensions (width/height)",
            ))

        if _present(size):
            dims = self._presets.get(size.strip().lower())
            if dims is None:
                return Err(ValidationError(
                    code=ValidationCode.UNKNOWN_PRESET_SIZE,
                    message=f"Invalid size. Must be one of: {', '.join(self._presets)}",
                ))
            return Ok(TransformSpec(width=dims[0], height=dims[1], fit=fit))

        if _present(width) or _present(height):
            parsed_width = _positive_int(width)
            parsed_height = _positive_int(height)
            if parsed_width is None and parsed_height is None:
                return Err(ValidationError(
                    code=ValidationCode.INVALID_DIMENSIONS,
                    message="Width and height must be positive integers",
                ))
            if max(parsed_width or 0, parsed_height or 0) > self._max_dimension:
                return Err(ValidationError(
                    code=ValidationCode.INVALID_DIMENSIONS,
                    message=f"Width and height must not exceed {self._max_dimension} pixels",
                ))
            return Ok(TransformSpec(width=parsed_width, height=parsed_height, fit=fit))

        dims = self._presets[self._default_preset]
        return Ok(TransformSpec(width=dims[0], height=dims[1], fit=fit))

    @staticmethod
    def _resolve_fit(raw: str | None) -> FitMode | None:
        if not _present(raw):
            return DEFAULT_FIT
        try:
            return FitMode(raw.strip().lower())
        except ValueError:
            return None
