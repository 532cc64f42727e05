import io
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from resizer.config import Settings
from resizer.exceptions import ObjectNotFound
from resizer.main import create_app
from resizer.resize.dependencies import build_orchestrator
from resizer.resize.service import ResizeOrchestrator
from resizer.s3 import StoredObject

SOURCE_BUCKET = "source"
RESIZED_BUCKET = "resized"
WATERMARK_KEY = "brand/watermark.png"


def make_image(
    width: int,
    height: int,
    color: tuple[int, ...] = (255, 0, 0),
    fmt: str = "JPEG",
    mode: str = "RGB",
) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


class FakeObjectStore:
    """In-memory ``ObjectStore`` that records every call."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], StoredObject] = {}
        self.errors: dict[tuple[str, str], Exception] = {}
        self.put_errors: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str, str]] = []

    def add(self, bucket: str, key: str, body: bytes, content_type: str = "image/jpeg") -> None:
        self.objects[(bucket, key)] = StoredObject(body=body, content_type=content_type)

    def get(self, bucket: str, key: str) -> StoredObject:
        self.calls.append(("get", bucket, key))
        if (bucket, key) in self.errors:
            raise self.errors[(bucket, key)]
        try:
            return self.objects[(bucket, key)]
        except KeyError:
            raise ObjectNotFound(bucket, key) from None

    def put(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
        cache_control: str | None = None,
    ) -> None:
        self.calls.append(("put", bucket, key))
        if (bucket, key) in self.put_errors:
            raise self.put_errors[(bucket, key)]
        self.objects[(bucket, key)] = StoredObject(body=body, content_type=content_type)

    def puts(self) -> list[tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == "put"]

    def gets(self, bucket: str | None = None) -> list[tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == "get" and (bucket is None or c[1] == bucket)]


def make_settings(**overrides) -> Settings:
    values = {
        "source_bucket": SOURCE_BUCKET,
        "resized_bucket": RESIZED_BUCKET,
        "watermark_key": WATERMARK_KEY,
        "aws_region": "us-east-1",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> FakeObjectStore:
    store = FakeObjectStore()
    store.add(SOURCE_BUCKET, "banner.jpg", make_image(1000, 500))
    store.add(SOURCE_BUCKET, "media/film/2001/banner/banner.jpg", make_image(1000, 500, (0, 128, 0)))
    store.add(
        SOURCE_BUCKET,
        WATERMARK_KEY,
        make_image(100, 50, (0, 0, 255, 255), fmt="PNG", mode="RGBA"),
        content_type="image/png",
    )
    return store


@pytest.fixture
def orchestrator(settings: Settings, store: FakeObjectStore) -> ResizeOrchestrator:
    return build_orchestrator(settings, store)


@pytest.fixture
def client(settings: Settings, store: FakeObjectStore) -> Generator[TestClient, None, None]:
    with TestClient(create_app(settings, store)) as c:
        yield c
