"""
Image resize — wiring.

Settings and the preset table are read once (app startup or Lambda cold start)
and injected into the collaborators here. Routes get the ready orchestrator
from ``app.state``.
"""
from __future__ import annotations

from collections.abc import Mapping

from fastapi import Request

from resizer.config import Settings
from resizer.resize.constants import PRESET_DIMENSIONS
from resizer.resize.engine import ImageEngine
from resizer.resize.geometry import GeometryResolver
from resizer.resize.schemas import WatermarkSpec
from resizer.resize.service import ResizeOrchestrator, ResizePolicy
from resizer.resize.watermark import WatermarkCompositor
from resizer.s3 import ObjectStore, S3ObjectStore


def build_orchestrator(
    settings: Settings,
    store: ObjectStore | None = None,
    presets: Mapping[str, tuple[int, int]] = PRESET_DIMENSIONS,
) -> ResizeOrchestrator:
    if store is None:
        store = S3ObjectStore.from_settings(settings)
    policy = ResizePolicy.from_settings(settings)

    compositor = None
    if policy.watermark_enabled:
        compositor = WatermarkCompositor(
            store,
            settings.source_bucket,
            WatermarkSpec(
                asset_key=settings.watermark_key,
                width_fraction=settings.watermark_width_fraction,
                min_width=settings.watermark_min_width,
                margin=settings.watermark_margin,
            ),
        )

    return ResizeOrchestrator(
        store=store,
        resolver=GeometryResolver(presets, max_dimension=settings.max_dimension),
        engine=ImageEngine(pad_color=settings.pad_color),
        source_bucket=settings.source_bucket,
        resized_bucket=settings.resized_bucket,
        policy=policy,
        compositor=compositor,
    )


def get_orchestrator(request: Request) -> ResizeOrchestrator:
    return request.app.state.orchestrator
