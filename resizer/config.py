from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_files() -> list[str]:
    """Load .env from the project root then the working directory."""
    base = Path(__file__).resolve().parent.parent
    return [str(base / ".env"), ".env"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── AWS ───────────────────────────────────────────────────────────────────
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "us-east-1"
    s3_endpoint_url: str = ""  # MinIO / LocalStack; empty means AWS

    source_bucket: str = "images-source"
    resized_bucket: str = "images-resized"

    # ── Output ────────────────────────────────────────────────────────────────
    jpeg_quality: int = 80
    cache_control: str = "public, max-age=31536000"  # 1 year
    cache_key_include_fit: bool = True
    pad_color: str = "black"
    max_dimension: int = Field(default=10000, gt=0, le=65535)

    # ── Watermark ─────────────────────────────────────────────────────────────
    watermark_enabled: bool = True
    watermark_key: str = "watermark/watermark.png"
    watermark_width_fraction: float = 0.10
    watermark_min_width: int = 50
    watermark_margin: int = 10

    # ── Logging / CORS ───────────────────────────────────────────────────────
    verbose_logging: bool = False
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [x.strip() for x in self.cors_origins.split(",") if x.strip()]
