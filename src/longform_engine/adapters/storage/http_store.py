"""S3-compatible object store reached over HTTP."""

import re
from pathlib import Path
from urllib.parse import quote, unquote

import httpx

from longform_engine.adapters.storage.base import ObjectLocation, ObjectStore
from longform_engine.config import settings
from longform_engine.exceptions import StorageError
from longform_engine.logging import get_logger

logger = get_logger(__name__)

# Canonical virtual-hosted bucket URL: https://{bucket}.s3.{region}.amazonaws.com/{key}
S3_URL_PATTERN = re.compile(r"^https?://([^./]+)\.s3\.([^./]+)\.amazonaws\.com/(.+)$")

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


class HttpObjectStore(ObjectStore):
    """Object store for a bucket behind an S3-compatible HTTP gateway.

    Objects are read and written at ``{endpoint}/{bucket}/{key}``. Without an explicit
    gateway endpoint the bucket's virtual-hosted URL is used directly.
    """

    def __init__(
        self,
        bucket: str | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
        api_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.bucket = bucket or settings.storage_bucket
        self.region = region or settings.storage_region
        self.endpoint_url = (endpoint_url or settings.storage_endpoint_url or "").rstrip("/")
        self.api_token = api_token or settings.storage_api_token
        self._transport = transport

    @property
    def name(self) -> str:
        return "http"

    def parse_url(self, url: str) -> ObjectLocation | None:
        match = S3_URL_PATTERN.match(url.split("?")[0])
        if not match:
            return None
        bucket, region, key = match.groups()
        return ObjectLocation(bucket=bucket, key=unquote(key), region=region)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key)}"

    def _object_url(self, location: ObjectLocation) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url}/{location.bucket}/{quote(location.key)}"
        region = location.region or self.region
        return f"https://{location.bucket}.s3.{region}.amazonaws.com/{quote(location.key)}"

    def _headers(self) -> dict[str, str]:
        if self.api_token:
            return {"Authorization": f"Bearer {self.api_token}"}
        return {}

    async def download_object(self, location: ObjectLocation, destination: Path) -> int:
        url = self._object_url(location)
        written = 0

        try:
            async with httpx.AsyncClient(
                timeout=300.0, follow_redirects=True, transport=self._transport
            ) as client:
                async with client.stream("GET", url, headers=self._headers()) as response:
                    response.raise_for_status()
                    with destination.open("wb") as f:
                        async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                            f.write(chunk)
                            written += len(chunk)
        except (OSError, httpx.HTTPError) as e:
            logger.error(
                "object_download_failed",
                bucket=location.bucket,
                key=location.key,
                error=str(e),
            )
            raise StorageError(f"Failed to download s3://{location.bucket}/{location.key}: {e}") from e

        return written

    async def upload_file(
        self,
        local_path: Path,
        key: str,
        content_type: str = "video/mp4",
    ) -> str:
        location = ObjectLocation(bucket=self.bucket, key=key, region=self.region)
        headers = {
            **self._headers(),
            "Content-Type": content_type,
            "x-amz-acl": "public-read",
        }

        try:
            data = local_path.read_bytes()
            async with httpx.AsyncClient(timeout=600.0, transport=self._transport) as client:
                response = await client.put(self._object_url(location), headers=headers, content=data)
                response.raise_for_status()
        except (OSError, httpx.HTTPError) as e:
            logger.error("object_upload_failed", key=key, error=str(e))
            raise StorageError(f"Failed to upload {local_path.name} to {key}: {e}") from e

        url = self.public_url(key)
        logger.info("object_upload_completed", key=key, size_bytes=len(data), url=url)
        return url
