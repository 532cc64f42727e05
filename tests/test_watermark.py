import pytest
from PIL import Image

from conftest import SOURCE_BUCKET, WATERMARK_KEY, FakeObjectStore, make_image
from resizer.exceptions import StoreError, WatermarkError
from resizer.resize.schemas import WatermarkSpec
from resizer.resize.watermark import WatermarkCompositor

BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def _close(pixel: tuple, expected: tuple, tolerance: int = 12) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


@pytest.fixture
def compositor(store: FakeObjectStore) -> WatermarkCompositor:
    return WatermarkCompositor(store, SOURCE_BUCKET, WatermarkSpec(asset_key=WATERMARK_KEY))


def test_overlay_width(compositor: WatermarkCompositor) -> None:
    assert compositor.overlay_width(400) == 40
    assert compositor.overlay_width(5) == 1
    assert compositor.overlay_width(None) == 50


def test_watermark_is_anchored_bottom_right(compositor: WatermarkCompositor) -> None:
    base = Image.new("RGB", (400, 300), WHITE)
    out = compositor.apply(base, target_width=400)

    assert out.size == base.size
    # 100x50 asset scaled to 40x20, 10px margin: x 350..389, y 270..289
    assert _close(out.getpixel((370, 280)), BLUE)
    assert _close(out.getpixel((345, 280)), WHITE)
    assert _close(out.getpixel((370, 295)), WHITE)
    assert _close(out.getpixel((5, 5)), WHITE)
    # the input is left untouched
    assert base.getpixel((370, 280)) == WHITE


def test_unknown_target_width_uses_floor(compositor: WatermarkCompositor) -> None:
    base = Image.new("RGB", (300, 300), WHITE)
    out = compositor.apply(base, target_width=None)
    # 50x25 overlay: x 240..289, y 265..289
    assert _close(out.getpixel((245, 280)), BLUE)
    assert _close(out.getpixel((235, 280)), WHITE)


def test_overlay_never_wider_than_base(store: FakeObjectStore) -> None:
    compositor = WatermarkCompositor(
        store, SOURCE_BUCKET, WatermarkSpec(asset_key=WATERMARK_KEY, min_width=500, margin=0),
    )
    out = compositor.apply(Image.new("RGB", (20, 20), WHITE), target_width=None)
    assert out.size == (20, 20)
    assert _close(out.getpixel((10, 15)), BLUE)


def test_transparent_pixels_keep_the_base(store: FakeObjectStore) -> None:
    store.add(SOURCE_BUCKET, "brand/clear.png", make_image(10, 10, (0, 0, 0, 0), fmt="PNG", mode="RGBA"))
    compositor = WatermarkCompositor(store, SOURCE_BUCKET, WatermarkSpec(asset_key="brand/clear.png"))
    out = compositor.apply(Image.new("RGB", (200, 200), WHITE), target_width=200)
    assert out.getpixel((180, 180)) == WHITE


def test_missing_asset_is_a_hard_failure(store: FakeObjectStore) -> None:
    compositor = WatermarkCompositor(store, SOURCE_BUCKET, WatermarkSpec(asset_key="brand/missing.png"))
    with pytest.raises(WatermarkError):
        compositor.apply(Image.new("RGB", (100, 100)), target_width=100)


def test_store_failure_is_a_hard_failure(store: FakeObjectStore, compositor: WatermarkCompositor) -> None:
    store.errors[(SOURCE_BUCKET, WATERMARK_KEY)] = StoreError(SOURCE_BUCKET, WATERMARK_KEY, "SlowDown")
    with pytest.raises(WatermarkError):
        compositor.apply(Image.new("RGB", (100, 100)), target_width=100)


def test_corrupt_asset_is_a_hard_failure(store: FakeObjectStore, compositor: WatermarkCompositor) -> None:
    store.add(SOURCE_BUCKET, WATERMARK_KEY, b"not a png")
    with pytest.raises(WatermarkError):
        compositor.apply(Image.new("RGB", (100, 100)), target_width=100)


def test_explicit_asset_key_overrides_default(store: FakeObjectStore, compositor: WatermarkCompositor) -> None:
    store.add(SOURCE_BUCKET, "brand/red.png", make_image(10, 10, (255, 0, 0, 255), fmt="PNG", mode="RGBA"))
    out = compositor.apply(Image.new("RGB", (200, 200), WHITE), target_width=200, asset_key="brand/red.png")
    assert _close(out.getpixel((180, 180)), (255, 0, 0))
    assert ("get", SOURCE_BUCKET, "brand/red.png") in store.calls


def test_decompression_bomb_asset_is_a_hard_failure(
    compositor: WatermarkCompositor, monkeypatch: pytest.MonkeyPatch
) -> None:
    def bomb(*args, **kwargs):
        raise Image.DecompressionBombError("too many pixels")

    monkeypatch.setattr(Image, "open", bomb)
    with pytest.raises(WatermarkError):
        compositor.apply(Image.new("RGB", (100, 100)), target_width=100)
