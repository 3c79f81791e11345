"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

# Set test environment before importing app modules
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="longform-engine-tests-"))
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RENDERER_PROVIDER"] = "stub"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["STORAGE_LOCAL_PATH"] = str(_TEST_ROOT / "storage")
os.environ["TEMP_DIR"] = str(_TEST_ROOT / "chunks")
os.environ["INTER_CHUNK_COOLDOWN_SECONDS"] = "0"
os.environ["VIDEO_GEN_PROVIDER"] = "stub"

from longform_engine.adapters.storage.local import LocalObjectStore  # noqa: E402
from longform_engine.adapters.video_gen.stub import StubVideoGenProvider  # noqa: E402
from longform_engine.domain.models import Scene  # noqa: E402
from longform_engine.domain.render_request import CompositionProps  # noqa: E402
from longform_engine.services.chunk_assembler import ChunkAssembler  # noqa: E402


def make_scenes(*durations: float) -> list[Scene]:
    """Scenes s0, s1, ... with the given durations."""
    return [Scene(id=f"s{i}", duration_seconds=d) for i, d in enumerate(durations)]


def make_props(*durations: float, fps: int = 30) -> CompositionProps:
    return CompositionProps(scenes=make_scenes(*durations), fps=fps)


class FakeFFmpeg:
    """Stands in for the ffmpeg subprocess used by ChunkAssembler.concatenate."""

    def __init__(self) -> None:
        self.returncode = 0
        self.write_output = True
        self.calls: list[dict] = []

    async def __call__(self, *cmd: str, **kwargs) -> MagicMock:
        manifest = Path(cmd[cmd.index("-i") + 1])
        self.calls.append({"cmd": list(cmd), "manifest": manifest.read_text().splitlines()})
        if self.write_output and self.returncode == 0:
            Path(cmd[-1]).write_bytes(b"joined video")

        process = MagicMock()
        process.communicate = AsyncMock(return_value=(b"", b"ffmpeg: concat error"))
        process.returncode = self.returncode
        return process


def _serve_chunk(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=f"video bytes for {request.url.path}".encode())


@pytest.fixture
def fake_ffmpeg() -> Generator[FakeFFmpeg, None, None]:
    """Patch subprocess creation in the assembler with a fake ffmpeg."""
    fake = FakeFFmpeg()
    with patch(
        "longform_engine.services.chunk_assembler.asyncio.create_subprocess_exec",
        new=fake,
    ):
        yield fake


@pytest.fixture
def local_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(base_path=tmp_path / "storage")


@pytest.fixture
def chunk_transport() -> httpx.MockTransport:
    """HTTP transport that serves a small body for any chunk URL."""
    return httpx.MockTransport(_serve_chunk)


@pytest.fixture
def assembler(
    tmp_path: Path,
    local_store: LocalObjectStore,
    chunk_transport: httpx.MockTransport,
) -> ChunkAssembler:
    return ChunkAssembler(
        store=local_store,
        temp_dir=tmp_path / "chunks",
        ffmpeg_path="ffmpeg",
        ffmpeg_timeout=30,
        transport=chunk_transport,
    )


@pytest.fixture
def video_gen_provider() -> StubVideoGenProvider:
    """Get a stub video generation provider."""
    return StubVideoGenProvider()

