"""Scene video generation adapters."""

from longform_engine.adapters.video_gen.base import (
    VideoGenProvider,
    VideoGenRequest,
    VideoGenResult,
)
from longform_engine.adapters.video_gen.stub import StubVideoGenProvider
from longform_engine.config import settings


def get_video_gen_provider() -> VideoGenProvider:
    """Get the configured video generation provider."""
    provider = getattr(settings, "video_gen_provider", "stub").lower()

    if provider == "stub":
        return StubVideoGenProvider()
    raise ValueError(f"Unknown video generation provider: {provider}")


__all__ = [
    "StubVideoGenProvider",
    "VideoGenProvider",
    "VideoGenRequest",
    "VideoGenResult",
    "get_video_gen_provider",
]
