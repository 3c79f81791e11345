"""Remote rendering adapters."""

from longform_engine.adapters.renderer.base import (
    RemoteRenderer,
    RemoteRenderResult,
    RenderHandle,
    RenderStatus,
)
from longform_engine.adapters.renderer.http_farm import HttpRenderFarmProvider
from longform_engine.adapters.renderer.stub import StubRemoteRenderer
from longform_engine.config import settings


def get_renderer_provider() -> RemoteRenderer:
    """Get the configured remote renderer."""
    provider = getattr(settings, "renderer_provider", "stub").lower()

    if provider == "http":
        return HttpRenderFarmProvider()
    else:
        return StubRemoteRenderer()


__all__ = [
    "HttpRenderFarmProvider",
    "RemoteRenderResult",
    "RemoteRenderer",
    "RenderHandle",
    "RenderStatus",
    "StubRemoteRenderer",
    "get_renderer_provider",
]
