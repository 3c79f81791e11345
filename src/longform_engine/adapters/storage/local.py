"""Object store backed by a local directory."""

import asyncio
import shutil
from pathlib import Path
from urllib.parse import unquote, urlparse

from longform_engine.adapters.storage.base import ObjectLocation, ObjectStore
from longform_engine.config import settings
from longform_engine.exceptions import StorageError
from longform_engine.logging import get_logger

logger = get_logger(__name__)


class LocalObjectStore(ObjectStore):
    """Store objects as files under a base directory, addressed by file:// URLs.

    Useful for development and for single-host deployments where the final
    video is served from a shared volume.
    """

    def __init__(self, base_path: Path | None = None, create_dirs: bool = True) -> None:
        self.base_path = (base_path or Path(settings.storage_local_path)).absolute()
        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    @property
    def name(self) -> str:
        return "local"

    def parse_url(self, url: str) -> ObjectLocation | None:
        parsed = urlparse(url)
        if parsed.scheme != "file":
            return None

        path = Path(unquote(parsed.path))
        try:
            key = path.relative_to(self.base_path)
        except ValueError:
            return None
        return ObjectLocation(bucket="local", key=key.as_posix())

    def public_url(self, key: str) -> str:
        return (self.base_path / key).as_uri()

    async def download_object(self, location: ObjectLocation, destination: Path) -> int:
        source = self.base_path / location.key
        try:
            await asyncio.to_thread(shutil.copyfile, source, destination)
        except OSError as e:
            logger.error("local_object_read_failed", key=location.key, error=str(e))
            raise StorageError(f"Failed to read {location.key}: {e}") from e
        return destination.stat().st_size

    async def upload_file(
        self,
        local_path: Path,
        key: str,
        content_type: str = "video/mp4",
    ) -> str:
        target = self.base_path / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.copyfile, local_path, target)
        except OSError as e:
            logger.error("local_object_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to store {local_path.name} as {key}: {e}") from e

        logger.info("local_object_stored", key=key, content_type=content_type)
        return self.public_url(key)
