"""Base interface for durable object storage."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ObjectLocation:
    """Bucket and key of a stored object."""

    bucket: str
    key: str
    region: str | None = None


class ObjectStore(ABC):
    """Abstract base class for object stores holding rendered media.

    Implementations:
    - HttpObjectStore: S3-compatible bucket reached over HTTP
    - LocalObjectStore: Directory on the local filesystem
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Store name identifier."""
        ...

    @abstractmethod
    def parse_url(self, url: str) -> ObjectLocation | None:
        """Return the object location if the URL belongs to this store."""
        ...

    @abstractmethod
    async def download_object(self, location: ObjectLocation, destination: Path) -> int:
        """Stream an object to a local file.

        Args:
            location: Object to fetch
            destination: Local file to write

        Returns:
            Number of bytes written

        Raises:
            StorageError: If the object cannot be fetched
        """
        ...

    @abstractmethod
    async def upload_file(
        self,
        local_path: Path,
        key: str,
        content_type: str = "video/mp4",
    ) -> str:
        """Upload a local file under ``key`` and return its public URL.

        Raises:
            StorageError: If the upload fails
        """
        ...

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Public URL an object under ``key`` resolves to."""
        ...
