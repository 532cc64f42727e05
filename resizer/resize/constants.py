"""
Image resize — static constants and enum types.
"""
import enum


class FitMode(str, enum.Enum):
    COVER = "cover"        # crop to fill the exact target
    CONTAIN = "contain"    # letterbox inside the exact target
    FILL = "fill"          # stretch, aspect ratio ignored
    INSIDE = "inside"      # fit within the target, no canvas
    OUTSIDE = "outside"    # cover the target, no crop


class PresetSize(str, enum.Enum):
    """Named resize presets accepted by the ``size`` parameter."""
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra-large"


# Preset dimensions: (width, height)
PRESET_DIMENSIONS: dict[str, tuple[int, int]] = {
    PresetSize.TINY.value: (150, 150),
    PresetSize.SMALL.value: (300, 300),
    PresetSize.MEDIUM.value: (600, 600),
    PresetSize.LARGE.value: (1200, 1200),
    PresetSize.EXTRA_LARGE.value: (2400, 2400),
}

DEFAULT_PRESET = PresetSize.MEDIUM.value
DEFAULT_FIT = FitMode.COVER

# Largest accepted width or height; JPEG itself stops at 65535
MAX_DIMENSION = 10000

OUTPUT_CONTENT_TYPE = "image/jpeg"

# Written in place of a dimension the engine derives from the aspect ratio
AUTO_DIMENSION = "auto"

# Dimension segment suffix for renditions where the request opted out of the watermark
NO_WATERMARK_SUFFIX = "-nowm"

# Request values of ``watermark`` that disable it
WATERMARK_OFF_VALUES = frozenset({"false", "0", "no", "off"})
