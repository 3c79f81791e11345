"""Video generation backend catalog."""

from longform_engine.providers.catalog import (
    DEFAULT_BACKENDS,
    BackendCapabilities,
    ProviderCatalog,
    VideoBackend,
    default_catalog,
)

__all__ = [
    "DEFAULT_BACKENDS",
    "BackendCapabilities",
    "ProviderCatalog",
    "VideoBackend",
    "default_catalog",
]
