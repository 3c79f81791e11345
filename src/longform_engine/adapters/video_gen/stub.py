"""Stub video generation provider for testing."""

from collections import deque
from collections.abc import Iterable
from uuid import uuid4

from longform_engine.adapters.video_gen.base import (
    VideoGenProvider,
    VideoGenRequest,
    VideoGenResult,
)
from longform_engine.logging import get_logger

logger = get_logger(__name__)


class StubVideoGenProvider(VideoGenProvider):
    """Stub provider that simulates generation without external calls.

    ``failures`` scripts successive calls: each entry is an error message for
    that call. Once exhausted, every call succeeds. Requests are recorded.
    """

    def __init__(self, failures: Iterable[str] | None = None) -> None:
        self.failures: deque[str] = deque(failures or [])
        self.requests: list[VideoGenRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def generate(self, request: VideoGenRequest) -> VideoGenResult:
        self.requests.append(request)
        logger.info(
            "stub_video_generation_started",
            provider=request.provider,
            prompt=request.prompt[:100],
            use_reference=request.reference_url is not None,
        )

        if self.failures:
            return VideoGenResult(success=False, error_message=self.failures.popleft())

        job_id = uuid4().hex[:12]
        return VideoGenResult(
            success=True,
            output_url=f"https://stub-clips.local/{request.provider}/{job_id}.mp4",
            duration_seconds=request.duration_seconds,
            metadata={"provider": request.provider, "job_id": job_id},
        )
