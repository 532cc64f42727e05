"""
Watermark overlay, applied after resize and before encode.

The asset is read from the source bucket on every use (no process-level
cache), scaled to a fraction of the target width and pasted at the
bottom-right corner. Any failure is raised as ``WatermarkError``: a missing
watermark must fail the request rather than silently ship an unbranded image.
"""
from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from resizer.exceptions import StoreError, WatermarkError

if TYPE_CHECKING:
    from resizer.resize.schemas import WatermarkSpec
    from resizer.s3 import ObjectStore

logger = logging.getLogger(__name__)


class WatermarkCompositor:
    def __init__(self, store: ObjectStore, bucket: str, spec: WatermarkSpec) -> None:
        self._store = store
        self._bucket = bucket
        self._spec = spec

    def overlay_width(self, target_width: int | None) -> int:
        if target_width is None:
            return self._spec.min_width
        return max(1, round(target_width * self._spec.width_fraction))

    def apply(
        self,
        base: Image.Image,
        target_width: int | None,
        asset_key: str | None = None,
    ) -> Image.Image:
        key = asset_key or self._spec.asset_key
        mark = self._load(key)

        width = min(self.overlay_width(target_width), base.width)
        height = max(1, round(mark.height * width / mark.width))
        mark = mark.resize((width, height), Image.Resampling.LANCZOS)

        margin = self._spec.margin
        x = max(0, base.width - width - margin)
        y = max(0, base.height - height - margin)

        out = base.copy()
        try:
            out.paste(mark, (x, y), mark)
        except (OSError, ValueError) as exc:
            raise WatermarkError(f"Cannot composite watermark {key}: {exc}") from exc
        return out

    def _load(self, key: str) -> Image.Image:
        try:
            stored = self._store.get(self._bucket, key)
        except StoreError as exc:
            raise WatermarkError(f"Cannot fetch watermark s3://{self._bucket}/{key}") from exc
        try:
            mark = Image.open(io.BytesIO(stored.body))
            mark.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            raise WatermarkError(f"Cannot decode watermark {key}: {exc}") from exc
        return mark.convert("RGBA")
