"""
Image resize — orchestration of the resolve-or-compute path.

Zero FastAPI imports. Receives collaborators via the constructor and raw
request values via parameters. Fully testable in isolation with an in-memory
object store.

States:
    ValidateInput -> CheckCache -> hit  -> Respond
                               -> miss -> FetchSource -> Transform
                                          -> [Watermark] -> Encode
                                          -> PersistDerived -> Respond
Any state may end in Fail(ErrorKind). Nothing is retried here.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from resizer.exceptions import ObjectNotFound, StoreError, TransformError, WatermarkError
from resizer.resize.constants import OUTPUT_CONTENT_TYPE, WATERMARK_OFF_VALUES
from resizer.resize.keys import derive_key, normalize_source_path
from resizer.resize.result import Err, Ok, Result
from resizer.resize.schemas import ErrorKind, ImageResult, ResizeFailure, ValidationError

if TYPE_CHECKING:
    from resizer.config import Settings
    from resizer.resize.engine import ImageEngine
    from resizer.resize.geometry import GeometryResolver
    from resizer.resize.watermark import WatermarkCompositor
    from resizer.s3 import ObjectStore

logger = logging.getLogger(__name__)

_INTERNAL_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class ResizePolicy:
    """Deployment-wide switches for the single resize state machine."""
    watermark_enabled: bool = True
    verbose_logging: bool = False
    include_fit_in_key: bool = True
    jpeg_quality: int = 80
    cache_control: str = "public, max-age=31536000"

    @classmethod
    def from_settings(cls, settings: Settings) -> ResizePolicy:
        return cls(
            watermark_enabled=settings.watermark_enabled,
            verbose_logging=settings.verbose_logging,
            include_fit_in_key=settings.cache_key_include_fit,
            jpeg_quality=settings.jpeg_quality,
            cache_control=settings.cache_control,
        )


def watermark_requested(raw: str | None) -> bool:
    """The request flag can only switch the watermark off."""
    if raw is None:
        return True
    return raw.strip().lower() not in WATERMARK_OFF_VALUES


def _bad_request(error: ValidationError) -> Err[ResizeFailure]:
    return Err(ResizeFailure(
        kind=ErrorKind.BAD_REQUEST, message=error.message, code=error.code.value,
    ))


def _not_found() -> Err[ResizeFailure]:
    return Err(ResizeFailure(
        kind=ErrorKind.SOURCE_NOT_FOUND, message="Original image not found",
    ))


def _internal() -> Err[ResizeFailure]:
    return Err(ResizeFailure(kind=ErrorKind.INTERNAL_ERROR, message=_INTERNAL_MESSAGE))


class ResizeOrchestrator:
    def __init__(
        self,
        *,
        store: ObjectStore,
        resolver: GeometryResolver,
        engine: ImageEngine,
        source_bucket: str,
        resized_bucket: str,
        policy: ResizePolicy,
        compositor: WatermarkCompositor | None = None,
    ) -> None:
        if policy.watermark_enabled and compositor is None:
            raise ValueError("Watermarking is enabled but no compositor was supplied")
        self._store = store
        self._resolver = resolver
        self._engine = engine
        self._source_bucket = source_bucket
        self._resized_bucket = resized_bucket
        self._policy = policy
        self._compositor = compositor

    def _trace(self, msg: str, *args: object) -> None:
        if self._policy.verbose_logging:
            logger.info(msg, *args)

    def resize(
        self,
        raw_path: str | None,
        params: Mapping[str, str | None],
    ) -> Result[ImageResult, ResizeFailure]:
        # ── ValidateInput ────────────────────────────────────────────────────
        source = normalize_source_path(raw_path)
        if isinstance(source, Err):
            self._trace("Rejected image path %r: %s", raw_path, source.error.code.value)
            return _bad_request(source.error)
        source_ref = source.value

        resolved = self._resolver.resolve(params)
        if isinstance(resolved, Err):
            self._trace("Rejected params %s: %s", dict(params), resolved.error.code.value)
            return _bad_request(resolved.error)
        spec = resolved.value

        apply_watermark = self._policy.watermark_enabled and watermark_requested(
            params.get("watermark")
        )
        key = derive_key(
            source_ref,
            spec,
            include_fit=self._policy.include_fit_in_key,
            watermark_opt_out=self._policy.watermark_enabled and not apply_watermark,
        )
        self._trace("Resolved %s -> %s (key=%s)", source_ref.key, spec, key)

        # ── CheckCache ───────────────────────────────────────────────────────
        try:
            cached = self._store.get(self._resized_bucket, key)
        except ObjectNotFound:
            self._trace("Cache miss: %s", key)
        except StoreError:
            logger.exception(
                "Derived lookup failed (image=%s, key=%s, params=%s)",
                source_ref.key, key, dict(params),
            )
            return _internal()
        else:
            self._trace("Cache hit: %s", key)
            return Ok(ImageResult(
                body=cached.body,
                content_type=OUTPUT_CONTENT_TYPE,
                cache_control=self._policy.cache_control,
                cache_hit=True,
                key=key,
            ))

        # ── FetchSource ──────────────────────────────────────────────────────
        try:
            original = self._store.get(self._source_bucket, source_ref.key)
        except ObjectNotFound:
            logger.warning("Source image not found: %s", source_ref.key)
            return _not_found()
        except StoreError:
            logger.exception("Source fetch failed (image=%s, key=%s)", source_ref.key, key)
            return _internal()

        # ── Transform -> [Watermark] -> Encode -> PersistDerived ─────────────
        try:
            image = self._engine.transform(original.body, spec)
            self._trace("Transformed %s to %dx%d", source_ref.key, image.width, image.height)
            if apply_watermark:
                image = self._compositor.apply(image, spec.width)
                self._trace("Watermarked %s", key)
            body = self._engine.encode(image, self._policy.jpeg_quality)
            self._store.put(
                self._resized_bucket,
                key,
                body,
                OUTPUT_CONTENT_TYPE,
                cache_control=self._policy.cache_control,
            )
        except (TransformError, WatermarkError, StoreError):
            logger.exception(
                "Resize failed (image=%s, key=%s, params=%s)",
                source_ref.key, key, dict(params),
            )
            return _internal()

        self._trace("Stored %s (%d bytes)", key, len(body))
        return Ok(ImageResult(
            body=body,
            content_type=OUTPUT_CONTENT_TYPE,
            cache_control=self._policy.cache_control,
            cache_hit=False,
            key=key,
        ))

    def original(self, raw_path: str | None) -> Result[ImageResult, ResizeFailure]:
        """Return the source object verbatim. No transform, no cache."""
        source = normalize_source_path(raw_path)
        if isinstance(source, Err):
            return _bad_request(source.error)
        key = source.value.key

        try:
            stored = self._store.get(self._source_bucket, key)
        except ObjectNotFound:
            logger.warning("Source image not found: %s", key)
            return _not_found()
        except StoreError:
            logger.exception("Original fetch failed (image=%s)", key)
            return _internal()

        self._trace("Served original %s (%d bytes)", key, len(stored.body))
        return Ok(ImageResult(body=stored.body, content_type=stored.content_type, key=key))
