"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    # Celery
    celery_broker_url: str = Field(
        default="redis://localhost:6379/0",
        description="Celery broker URL",
    )
    celery_result_backend: str = Field(
        default="redis://localhost:6379/0",
        description="Celery result backend URL",
    )

    # Remote rendering backend
    renderer_provider: str = Field(
        default="stub",
        description="Remote rendering provider (stub, http)",
    )
    render_api_url: str = Field(
        default="http://localhost:8400/v1",
        description="Base URL of the remote render farm API",
    )
    render_api_key: str | None = Field(default=None, description="Render farm API key")
    render_poll_interval: float = Field(
        default=2.0,
        description="Seconds between render progress polls",
    )
    render_max_poll_attempts: int = Field(
        default=900,
        description="Maximum progress polls before a render is treated as timed out",
    )
    default_composition_id: str = Field(
        default="UniversalVideo",
        description="Composition rendered when none is specified",
    )

    # Object storage
    storage_provider: str = Field(
        default="local",
        description="Object storage provider (local, http)",
    )
    storage_bucket: str = Field(
        default="longform-renders",
        description="Bucket holding rendered chunks and final videos",
    )
    storage_region: str = Field(default="us-east-2", description="Bucket region")
    storage_endpoint_url: str | None = Field(
        default=None,
        description="S3-compatible gateway endpoint (defaults to the bucket's virtual-host URL)",
    )
    storage_api_token: str | None = Field(
        default=None,
        description="Bearer token for the storage gateway",
    )
    storage_local_path: str = Field(
        default="./storage",
        description="Root directory for the local object store",
    )

    # Chunked rendering
    temp_dir: str = Field(
        default="/tmp/video-chunks",
        description="Scratch directory for downloaded chunks and concatenated output",
    )
    default_fps: int = Field(default=30, description="Frame rate used when props omit one")
    chunk_threshold_seconds: float = Field(
        default=90.0,
        description="Videos longer than this are rendered in chunks",
    )
    max_chunk_duration_seconds: float = Field(
        default=120.0,
        description="Upper bound on a single chunk's scene duration",
    )
    inter_chunk_cooldown_seconds: float = Field(
        default=15.0,
        description="Pause between sequential chunk submissions to stay under provider quotas",
    )
    max_concurrent_chunks: int = Field(
        default=1,
        description="Number of chunks rendered at the same time (1 = sequential)",
    )

    # Chunk retry policy
    chunk_max_attempts: int = Field(
        default=5,
        description="Maximum render attempts per chunk",
    )
    rate_limit_base_delay: float = Field(
        default=30.0,
        description="First backoff delay in seconds after a rate-limit failure",
    )
    rate_limit_backoff_factor: float = Field(
        default=2.0,
        description="Multiplier applied to the rate-limit delay on each attempt",
    )
    rate_limit_max_delay: float = Field(
        default=120.0,
        description="Cap on the rate-limit backoff delay in seconds",
    )
    chunk_retry_delay: float = Field(
        default=10.0,
        description="Fixed delay in seconds before retrying a non-rate-limit failure",
    )

    # FFmpeg
    ffmpeg_path: str | None = Field(
        default=None,
        description="Path to FFmpeg binary (uses 'ffmpeg' from PATH if not specified)",
    )
    ffmpeg_timeout: int = Field(
        default=600,
        description="FFmpeg concatenation timeout in seconds",
    )

    # Regeneration
    regeneration_max_attempts: int = Field(
        default=5,
        description="Maximum generation attempts per scene before giving up",
    )
    video_gen_provider: str = Field(
        default="stub",
        description="Video generation provider used by the regeneration loop",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


# Convenience alias
settings = get_settings()
