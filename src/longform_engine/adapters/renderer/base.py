"""Base interface for remote rendering backends."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from longform_engine.domain.render_request import ChunkRenderRequest
from longform_engine.exceptions import (
    RenderCancelledError,
    RenderConfigurationError,
    RenderNotFoundError,
)
from longform_engine.logging import get_logger
from longform_engine.utils.async_utils import wait

logger = get_logger(__name__)

BackendProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class RenderHandle:
    """Pollable reference to a render job on the backend."""

    render_id: str
    bucket_name: str | None = None


@dataclass
class RenderStatus:
    """Progress of a submitted render job."""

    overall_progress: float
    done: bool
    output_file: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass
class RemoteRenderResult:
    """Result of one render attempt on the backend."""

    success: bool
    output_url: str | None = None
    error_message: str | None = None
    render_id: str | None = None
    metadata: dict[str, Any] | None = None


class RemoteRenderer(ABC):
    """Abstract base class for remote rendering backends.

    Implementations:
    - HttpRenderFarmProvider: Submits compositions to a render farm over HTTP
    - StubRemoteRenderer: Scriptable in-memory backend for tests and local runs

    Subclasses implement submission and status lookup; ``render`` drives the
    submit-then-poll loop and converts remote failures into results.
    """

    poll_interval: float = 2.0
    max_poll_attempts: int = 900

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def start_render(self, request: ChunkRenderRequest) -> RenderHandle:
        """Submit a render job.

        Args:
            request: Typed render request for a chunk or a whole composition

        Returns:
            Handle used to poll the job

        Raises:
            RenderBackendError: If the backend refuses the job
            RenderConfigurationError: If the backend is not configured
        """
        ...

    @abstractmethod
    async def get_render_progress(self, handle: RenderHandle) -> RenderStatus:
        """Fetch the current status of a submitted job."""
        ...

    async def render(
        self,
        request: ChunkRenderRequest,
        on_progress: BackendProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> RemoteRenderResult:
        """Submit a render and poll it to completion.

        Args:
            request: Typed render request
            on_progress: Optional callback receiving backend progress in percent
            cancel_event: Optional event that interrupts polling

        Returns:
            RemoteRenderResult with the output URL or the failure message
        """
        try:
            handle = await self.start_render(request)
        except (RenderConfigurationError, RenderCancelledError):
            raise
        except Exception as e:
            logger.warning(
                "remote_render_submit_failed",
                provider=self.name,
                chunk_index=request.chunk_index,
                error=str(e),
            )
            return RemoteRenderResult(success=False, error_message=str(e))

        logger.info(
            "remote_render_submitted",
            provider=self.name,
            render_id=handle.render_id,
            chunk_index=request.chunk_index,
        )
        return await self.poll_to_completion(handle, on_progress, cancel_event)

    async def poll_to_completion(
        self,
        handle: RenderHandle,
        on_progress: BackendProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> RemoteRenderResult:
        """Poll a submitted render until it finishes, fails or times out."""
        for attempt in range(self.max_poll_attempts):
            await wait(self.poll_interval, cancel_event)

            try:
                status = await self.get_render_progress(handle)
            except RenderConfigurationError:
                raise
            except RenderNotFoundError as e:
                logger.warning("remote_render_lost", render_id=handle.render_id, error=str(e))
                return RemoteRenderResult(
                    success=False,
                    error_message=str(e),
                    render_id=handle.render_id,
                )
            except Exception as e:
                logger.warning(
                    "remote_render_poll_error",
                    render_id=handle.render_id,
                    error=str(e),
                    attempt=attempt + 1,
                )
                continue

            percent = round(status.overall_progress * 100)
            logger.debug("remote_render_poll_status", render_id=handle.render_id, percent=percent)
            if on_progress:
                on_progress(percent)

            if status.errors:
                return RemoteRenderResult(
                    success=False,
                    error_message=f"Render failed: {', '.join(status.errors)}",
                    render_id=handle.render_id,
                )

            if status.done and status.output_file:
                logger.info(
                    "remote_render_completed",
                    render_id=handle.render_id,
                    output_url=status.output_file[:100],
                )
                return RemoteRenderResult(
                    success=True,
                    output_url=status.output_file,
                    render_id=handle.render_id,
                    metadata={"provider": self.name, "bucket_name": handle.bucket_name},
                )

            if status.done:
                return RemoteRenderResult(
                    success=False,
                    error_message="Render completed but no output file was generated",
                    render_id=handle.render_id,
                )

        return RemoteRenderResult(
            success=False,
            error_message=(
                f"Render timed out after {self.max_poll_attempts * self.poll_interval:.0f} seconds"
            ),
            render_id=handle.render_id,
        )

    async def health_check(self) -> bool:
        """Check if the backend is available and healthy."""
        return True
