import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from resizer.config import Settings
from resizer.middleware import (
    error_envelope_middleware,
    http_exception_handler,
    request_id_middleware,
)
from resizer.resize.dependencies import build_orchestrator
from resizer.resize.router import router as resize_router
from resizer.s3 import ObjectStore


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Image Resizer

On-demand image resizing backed by S3.

* **Resize** — named presets (`tiny` 150, `small` 300, `medium` 600, `large` 1200,
  `extra-large` 2400) or explicit `width` / `height`, with `fit` one of
  `cover`, `contain`, `fill`, `inside`, `outside`.
* **Cache** — the first request computes the image and stores it under
  `{dir}/{width}x{height}/{fit}/{filename}` in the resized bucket; later identical
  requests are served from there.
* **Watermark** — applied bottom-right unless `watermark=false`.
* **Original** — the source object, byte for byte.

### Error shape
All errors return a consistent JSON envelope:
```json
{ "error": { "code": "InvalidFit", "message": "..." }, "request_id": "..." }
```
"""

_TAGS_METADATA = [
    {
        "name": "images",
        "description": "Resize images on demand and serve originals.",
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s:%(name)s: %(message)s",
    )
    logging.getLogger("botocore").setLevel(logging.WARNING)


def create_app(
    settings: Settings | None = None,
    store: ObjectStore | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.getLogger(__name__).info(
            "Resizer ready (source=%s, resized=%s, watermark=%s)",
            settings.source_bucket,
            settings.resized_bucket,
            settings.watermark_enabled,
        )
        yield

    app = FastAPI(
        title="Image Resizer",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Built once; every request shares the same immutable collaborators
    app.state.orchestrator = build_orchestrator(settings, store)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Middleware (applied in reverse-registration order: last added = outermost)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(resize_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"], include_in_schema=True)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="resizer")

    return app


app = create_app()
