"""Object storage adapters."""

from longform_engine.adapters.storage.base import ObjectLocation, ObjectStore
from longform_engine.adapters.storage.http_store import HttpObjectStore
from longform_engine.adapters.storage.local import LocalObjectStore
from longform_engine.config import settings


def get_object_store() -> ObjectStore:
    """Get the configured object store."""
    provider = getattr(settings, "storage_provider", "local").lower()

    if provider == "http":
        return HttpObjectStore()
    else:
        return LocalObjectStore()


__all__ = [
    "HttpObjectStore",
    "LocalObjectStore",
    "ObjectLocation",
    "ObjectStore",
    "get_object_store",
]
