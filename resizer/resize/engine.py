"""
Pillow transform engine — decode, resize by fit mode, encode to JPEG.

Fit modes with both dimensions given:
  cover    scale to cover the target, centre crop to exactly the target
  contain  scale to fit inside, centred on an exact target canvas (padded)
  fill     stretch to exactly the target
  inside   largest size that fits within the target, no canvas
  outside  smallest size that covers the target, no crop

With a single dimension the other one is derived from the source aspect ratio
and every fit mode reduces to a plain proportional resize.
"""
from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from resizer.exceptions import TransformError
from resizer.resize.constants import FitMode
from resizer.resize.schemas import TransformSpec

logger = logging.getLogger(__name__)

_RESAMPLE = Image.Resampling.LANCZOS
_CENTER = (0.5, 0.5)


def decode(pixels: bytes) -> Image.Image:
    """Open image bytes, apply EXIF orientation and flatten to RGB."""
    try:
        image = Image.open(io.BytesIO(pixels))
        image.load()
        image = ImageOps.exif_transpose(image)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError, MemoryError) as exc:
        raise TransformError(f"Cannot decode image: {exc}") from exc
    return _to_rgb(image)


def _to_rgb(image: Image.Image) -> Image.Image:
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    elif image.mode == "PA":
        image = image.convert("RGBA")

    if image.mode in ("RGBA", "LA"):
        # JPEG has no alpha: composite onto a white background
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def target_size(source: tuple[int, int], spec: TransformSpec) -> tuple[int, int]:
    """Exact target box; a missing dimension follows the source aspect ratio."""
    src_w, src_h = source
    if spec.width is not None and spec.height is not None:
        return spec.width, spec.height
    if spec.width is not None:
        return spec.width, max(1, round(src_h * spec.width / src_w))
    return max(1, round(src_w * spec.height / src_h)), spec.height


def _scaled(source: tuple[int, int], scale: float) -> tuple[int, int]:
    return max(1, round(source[0] * scale)), max(1, round(source[1] * scale))


class ImageEngine:
    """Narrow adapter over Pillow's resize / crop / pad primitives."""

    def __init__(self, pad_color: str = "black") -> None:
        self._pad_color = pad_color

    def transform(self, pixels: bytes, spec: TransformSpec) -> Image.Image:
        image = decode(pixels)
        try:
            return self.resize(image, spec)
        except (OSError, ValueError, MemoryError) as exc:
            raise TransformError(f"Cannot resize image: {exc}") from exc

    def resize(self, image: Image.Image, spec: TransformSpec) -> Image.Image:
        target = target_size(image.size, spec)

        if spec.width is None or spec.height is None:
            return image.resize(target, _RESAMPLE)

        if spec.fit == FitMode.COVER:
            return ImageOps.fit(image, target, _RESAMPLE, centering=_CENTER)
        if spec.fit == FitMode.CONTAIN:
            return ImageOps.pad(
                image, target, _RESAMPLE, color=self._pad_color, centering=_CENTER,
            )
        if spec.fit == FitMode.FILL:
            return image.resize(target, _RESAMPLE)

        ratio_w = target[0] / image.width
        ratio_h = target[1] / image.height
        if spec.fit == FitMode.INSIDE:
            return image.resize(_scaled(image.size, min(ratio_w, ratio_h)), _RESAMPLE)
        return image.resize(_scaled(image.size, max(ratio_w, ratio_h)), _RESAMPLE)

    @staticmethod
    def encode(image: Image.Image, quality: int = 80) -> bytes:
        buf = io.BytesIO()
        try:
            image.save(buf, format="JPEG", quality=quality)
        except (OSError, ValueError) as exc:
            raise TransformError(f"Cannot encode image: {exc}") from exc
        return buf.getvalue()
