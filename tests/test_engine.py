import io

import pytest
from PIL import Image

from conftest import make_image
from resizer.exceptions import TransformError
from resizer.resize.constants import FitMode
from resizer.resize.engine import ImageEngine, target_size
from resizer.resize.schemas import TransformSpec

RED = (255, 0, 0)
WIDE = make_image(1000, 500, RED, fmt="PNG")


def _close(pixel: tuple, expected: tuple, tolerance: int = 12) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


@pytest.fixture
def engine() -> ImageEngine:
    return ImageEngine(pad_color="black")


def test_contain_pads_to_exact_target(engine: ImageEngine) -> None:
    image = engine.transform(WIDE, TransformSpec(width=200, height=200, fit=FitMode.CONTAIN))
    assert image.size == (200, 200)
    # 2:1 source scaled to 200x100, centred: 50px bands above and below
    assert _close(image.getpixel((100, 10)), (0, 0, 0))
    assert _close(image.getpixel((100, 190)), (0, 0, 0))
    assert _close(image.getpixel((100, 100)), RED)
    assert _close(image.getpixel((2, 60)), RED)


def test_fill_stretches_without_padding(engine: ImageEngine) -> None:
    image = engine.transform(WIDE, TransformSpec(width=200, height=200, fit=FitMode.FILL))
    assert image.size == (200, 200)
    assert _close(image.getpixel((100, 5)), RED)
    assert _close(image.getpixel((100, 195)), RED)


def test_cover_crops_to_exact_target(engine: ImageEngine) -> None:
    image = engine.transform(WIDE, TransformSpec(width=200, height=200, fit=FitMode.COVER))
    assert image.size == (200, 200)
    assert _close(image.getpixel((0, 0)), RED)


def test_cover_keeps_the_centre() -> None:
    source = Image.new("RGB", (300, 100), (0, 0, 255))
    source.paste((255, 0, 0), (100, 0, 200, 100))
    buf = io.BytesIO()
    source.save(buf, format="PNG")

    image = ImageEngine().transform(buf.getvalue(), TransformSpec(width=50, height=50))
    assert image.size == (50, 50)
    assert _close(image.getpixel((25, 25)), RED)
    assert _close(image.getpixel((6, 25)), RED)


def test_inside_fits_within_target(engine: ImageEngine) -> None:
    image = engine.transform(WIDE, TransformSpec(width=200, height=200, fit=FitMode.INSIDE))
    assert image.size == (200, 100)


def test_outside_covers_target(engine: ImageEngine) -> None:
    image = engine.transform(WIDE, TransformSpec(width=200, height=200, fit=FitMode.OUTSIDE))
    assert image.size == (400, 200)


@pytest.mark.parametrize("fit", list(FitMode))
def test_single_dimension_follows_aspect_ratio(engine: ImageEngine, fit: FitMode) -> None:
    assert engine.transform(WIDE, TransformSpec(width=200, fit=fit)).size == (200, 100)
    assert engine.transform(WIDE, TransformSpec(height=50, fit=fit)).size == (100, 50)


def test_target_size_never_collapses_to_zero() -> None:
    assert target_size((4000, 10), TransformSpec(width=100)) == (100, 1)


def test_encode_produces_jpeg(engine: ImageEngine) -> None:
    image = engine.transform(WIDE, TransformSpec(width=200, height=200, fit=FitMode.CONTAIN))
    encoded = engine.encode(image, quality=80)
    decoded = Image.open(io.BytesIO(encoded))
    assert decoded.format == "JPEG"
    assert decoded.size == (200, 200)


def test_transparent_png_is_flattened_on_white(engine: ImageEngine) -> None:
    pixels = make_image(100, 100, (0, 0, 0, 0), fmt="PNG", mode="RGBA")
    image = engine.transform(pixels, TransformSpec(width=10, height=10))
    assert image.mode == "RGB"
    assert _close(image.getpixel((5, 5)), (255, 255, 255))


def test_palette_and_grayscale_inputs(engine: ImageEngine) -> None:
    gray = make_image(40, 20, 128, fmt="PNG", mode="L")
    assert engine.transform(gray, TransformSpec(width=20)).mode == "RGB"
    gif = make_image(40, 20, 3, fmt="GIF", mode="P")
    assert engine.transform(gif, TransformSpec(width=20)).size == (20, 10)


def test_corrupt_input_raises_transform_error(engine: ImageEngine) -> None:
    with pytest.raises(TransformError):
        engine.transform(b"definitely not an image", TransformSpec(width=10))


def test_truncated_input_raises_transform_error(engine: ImageEngine) -> None:
    with pytest.raises(TransformError):
        engine.transform(make_image(200, 200)[:300], TransformSpec(width=10))


def test_out_of_memory_raises_transform_error(engine: ImageEngine, monkeypatch: pytest.MonkeyPatch) -> None:
    def exhausted(*args, **kwargs):
        raise MemoryError

    monkeypatch.setattr(Image.Image, "resize", exhausted)
    with pytest.raises(TransformError):
        engine.transform(WIDE, TransformSpec(width=30000, height=30000, fit=FitMode.FILL))
