"""Adapters for external services."""

from longform_engine.adapters.renderer.base import RemoteRenderer
from longform_engine.adapters.storage.base import ObjectStore
from longform_engine.adapters.video_gen.base import VideoGenProvider

__all__ = [
    "ObjectStore",
    "RemoteRenderer",
    "VideoGenProvider",
]
