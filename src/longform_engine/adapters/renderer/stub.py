"""Stub remote renderer for tests and local runs."""

from collections import deque
from collections.abc import Iterable
from uuid import uuid4

from longform_engine.adapters.renderer.base import RemoteRenderer, RenderHandle, RenderStatus
from longform_engine.domain.render_request import ChunkRenderRequest
from longform_engine.exceptions import RenderBackendError, RenderNotFoundError
from longform_engine.logging import get_logger

logger = get_logger(__name__)


class StubRemoteRenderer(RemoteRenderer):
    """Backend that completes every render immediately.

    ``failures`` scripts the outcome of successive submissions: each entry is
    an error message raised for that submission, and once the queue is empty
    every submission succeeds. Submitted requests are kept in ``requests``.
    """

    def __init__(
        self,
        failures: Iterable[str] | None = None,
        output_url_template: str = "https://stub-renders.local/{render_id}.mp4",
        poll_interval: float = 0.0,
    ) -> None:
        self.failures: deque[str] = deque(failures or [])
        self.output_url_template = output_url_template
        self.poll_interval = poll_interval
        self.max_poll_attempts = 3
        self.requests: list[ChunkRenderRequest] = []
        self._outputs: dict[str, str] = {}

    @property
    def name(self) -> str:
        return "stub"

    async def start_render(self, request: ChunkRenderRequest) -> RenderHandle:
        self.requests.append(request)

        if self.failures:
            error = self.failures.popleft()
            logger.info("stub_render_failed", chunk_index=request.chunk_index, error=error)
            raise RenderBackendError(error)

        render_id = uuid4().hex[:12]
        self._outputs[render_id] = self.output_url_template.format(
            render_id=render_id,
            chunk_index=request.chunk_index if request.chunk_index is not None else "full",
        )
        return RenderHandle(render_id=render_id, bucket_name="stub-bucket")

    async def get_render_progress(self, handle: RenderHandle) -> RenderStatus:
        output = self._outputs.get(handle.render_id)
        if output is None:
            raise RenderNotFoundError(f"Render {handle.render_id} not found")
        return RenderStatus(overall_progress=1.0, done=True, output_file=output)
