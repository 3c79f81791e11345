"""Chunk assembly: download rendered chunks, stream-copy concatenate, upload.

No retry happens at this layer; download and upload failures raise
StorageError, concatenation failures raise ConcatenationError.
"""

import asyncio
import time
from collections.abc import Iterable, Sequence
from pathlib import Path
from uuid import uuid4

import httpx

from longform_engine.adapters.storage import ObjectStore, get_object_store
from longform_engine.config import settings
from longform_engine.exceptions import ConcatenationError, StorageError
from longform_engine.logging import get_logger

logger = get_logger(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def _unique_suffix() -> str:
    """Timestamp plus a random token; the temp directory is shared across renders."""
    return f"{_epoch_ms()}_{uuid4().hex[:8]}"


def _manifest_line(path: Path) -> str:
    escaped = str(path.absolute()).replace("'", "'\\''")
    return f"file '{escaped}'"


class ChunkAssembler:
    """Downloads chunk artifacts, concatenates them and uploads the result."""

    def __init__(
        self,
        store: ObjectStore | None = None,
        temp_dir: Path | None = None,
        ffmpeg_path: str | None = None,
        ffmpeg_timeout: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.store = store or get_object_store()
        self.temp_dir = temp_dir or Path(settings.temp_dir)
        self.ffmpeg_path = ffmpeg_path or settings.ffmpeg_path or "ffmpeg"
        self.ffmpeg_timeout = ffmpeg_timeout or settings.ffmpeg_timeout
        self._transport = transport

        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def output_path(self, logical_id: str) -> Path:
        """Temp path for the concatenated video of a project."""
        return self.temp_dir / f"final_{logical_id}_{_unique_suffix()}.mp4"

    async def download(self, remote_url: str, chunk_index: int) -> Path:
        """Stream a rendered chunk to a local temp file.

        URLs the object store recognizes are fetched through it; anything
        else is fetched directly over HTTP.

        Raises:
            StorageError: If the download fails
        """
        local_path = self.temp_dir / f"chunk_{chunk_index}_{_unique_suffix()}.mp4"
        logger.info("chunk_download_started", chunk_index=chunk_index, url=remote_url[:100])

        location = self.store.parse_url(remote_url)
        try:
            if location is not None:
                size = await self.store.download_object(location, local_path)
            else:
                size = await self._download_direct(remote_url, local_path)
        except BaseException:
            # Partial files never reach the caller's cleanup list
            local_path.unlink(missing_ok=True)
            raise

        logger.info(
            "chunk_download_completed",
            chunk_index=chunk_index,
            path=str(local_path),
            size_mb=round(size / 1024 / 1024, 2),
        )
        return local_path

    async def _download_direct(self, url: str, local_path: Path) -> int:
        written = 0
        try:
            async with httpx.AsyncClient(
                timeout=300.0, follow_redirects=True, transport=self._transport
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    with local_path.open("wb") as f:
                        async for data in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                            f.write(data)
                            written += len(data)
        except (OSError, httpx.HTTPError) as e:
            logger.error("chunk_download_failed", url=url[:100], error=str(e))
            raise StorageError(f"Failed to download {url[:100]}: {e}") from e
        return written

    async def concatenate(self, local_paths: Sequence[Path], output_path: Path) -> None:
        """Join chunk files in order without re-encoding.

        The manifest file is removed whether or not concatenation succeeds.

        Raises:
            ConcatenationError: If there is nothing to join or ffmpeg fails
        """
        if not local_paths:
            raise ConcatenationError("No chunk files to concatenate")

        manifest = self.temp_dir / f"concat_list_{_unique_suffix()}.txt"
        manifest.write_text("\n".join(_manifest_line(p) for p in local_paths) + "\n")

        cmd = [
            self.ffmpeg_path,
            "-y",
            "-f",
            "concat",
            "-safe",
            "0",
            "-i",
            str(manifest),
            "-c",
            "copy",
            str(output_path),
        ]
        logger.info("concatenation_started", chunk_count=len(local_paths), output=str(output_path))

        try:
            await self._run_ffmpeg(cmd)
            if not output_path.exists():
                raise ConcatenationError(f"FFmpeg produced no output at {output_path}")
        finally:
            manifest.unlink(missing_ok=True)

        logger.info(
            "concatenation_completed",
            output=str(output_path),
            size_mb=round(output_path.stat().st_size / 1024 / 1024, 2),
        )

    async def _run_ffmpeg(self, cmd: list[str]) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ConcatenationError(f"Failed to start FFmpeg: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.ffmpeg_timeout)
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise ConcatenationError(
                f"FFmpeg concatenation timed out after {self.ffmpeg_timeout}s"
            ) from e

        if process.returncode != 0:
            tail = stderr.decode(errors="replace")[-500:] if stderr else ""
            logger.error("concatenation_failed", returncode=process.returncode, stderr=tail)
            raise ConcatenationError(f"FFmpeg exited with code {process.returncode}: {tail}")

    async def upload(self, local_path: Path, logical_id: str) -> str:
        """Upload the final video under a project-namespaced key.

        Returns:
            Public URL of the uploaded video

        Raises:
            StorageError: If the upload fails
        """
        key = f"renders/chunked/{logical_id}_{_epoch_ms()}.mp4"
        logger.info("final_video_upload_started", key=key, store=self.store.name)
        url = await self.store.upload_file(local_path, key, content_type="video/mp4")
        logger.info("final_video_upload_completed", url=url)
        return url

    def cleanup(self, paths: Iterable[Path]) -> None:
        """Delete temp files, logging failures instead of raising."""
        paths = list(paths)
        logger.debug("temp_files_cleanup", count=len(paths))
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("temp_file_cleanup_failed", path=str(path), error=str(e))
