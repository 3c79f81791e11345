"""Chunk render dispatch with rate-limit-aware retry.

Each chunk is submitted to the remote renderer independently. Failures come
back as ``RemoteRenderResult(success=False)`` and are classified by message:
rate limits back off exponentially (capped), audio playback failures are
retried with the ambient layer disabled, everything else waits a fixed delay.
Attempts for one chunk are strictly sequential.
"""

import asyncio
import re
import time
from dataclasses import dataclass

from longform_engine.adapters.renderer import (
    RemoteRenderer,
    RenderHandle,
    get_renderer_provider,
)
from longform_engine.adapters.renderer.base import BackendProgressCallback
from longform_engine.config import settings
from longform_engine.domain.enums import ChunkStatus, RenderErrorKind
from longform_engine.domain.models import ChunkPlan, ChunkRenderResult
from longform_engine.domain.render_request import (
    ChunkRenderRequest,
    CompositionProps,
    build_chunk_request,
    without_ambient_audio,
)
from longform_engine.exceptions import RenderCancelledError, RenderConfigurationError
from longform_engine.logging import get_logger
from longform_engine.utils.async_utils import raise_if_cancelled, wait

logger = get_logger(__name__)

RATE_LIMIT_SIGNATURES = (
    "rate exceeded",
    "rate limit",
    "concurrency limit",
    "too many requests",
    "toomanyrequestsexception",
    "is currently busy",
    "concurrentinvocationlimitexceeded",
)

# HTTP status codes count only as whole numbers, never inside frame counts or ids
RATE_LIMIT_STATUS = re.compile(r"\b429\b")
TRANSIENT_STATUS = re.compile(r"\b50[0234]\b")

AUDIO_PLAYBACK_SIGNATURES = (
    "notallowederror",
    "play() failed",
    "audio playback",
    "failed to play audio",
    "mediaerror",
)

TRANSIENT_SIGNATURES = (
    "timeout",
    "timed out",
    "connection reset",
    "connection refused",
    "connection error",
    "econnreset",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
    "internal server error",
)


def classify_render_error(message: str) -> RenderErrorKind:
    """Classify a render failure message (case-insensitive substring match)."""
    lowered = message.lower()

    if any(sig in lowered for sig in RATE_LIMIT_SIGNATURES) or RATE_LIMIT_STATUS.search(lowered):
        return RenderErrorKind.RATE_LIMITED
    if any(sig in lowered for sig in AUDIO_PLAYBACK_SIGNATURES):
        return RenderErrorKind.AUDIO_PLAYBACK
    if any(sig in lowered for sig in TRANSIENT_SIGNATURES) or TRANSIENT_STATUS.search(lowered):
        return RenderErrorKind.TRANSIENT
    return RenderErrorKind.UNKNOWN


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget and delays for one chunk, in seconds."""

    max_attempts: int = 5
    rate_limit_base_delay: float = 30.0
    rate_limit_backoff_factor: float = 2.0
    rate_limit_max_delay: float = 120.0
    retry_delay: float = 10.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.chunk_max_attempts,
            rate_limit_base_delay=settings.rate_limit_base_delay,
            rate_limit_backoff_factor=settings.rate_limit_backoff_factor,
            rate_limit_max_delay=settings.rate_limit_max_delay,
            retry_delay=settings.chunk_retry_delay,
        )

    def rate_limit_delay(self, attempt: int) -> float:
        """Backoff after the given (1-based) rate-limited attempt."""
        delay = self.rate_limit_base_delay * self.rate_limit_backoff_factor ** (attempt - 1)
        return min(delay, self.rate_limit_max_delay)

    def delay_for(self, kind: RenderErrorKind, attempt: int) -> float:
        if kind == RenderErrorKind.RATE_LIMITED:
            return self.rate_limit_delay(attempt)
        return self.retry_delay


@dataclass
class ChunkStatusReport:
    """One-shot status of a chunk render already submitted to the backend."""

    status: ChunkStatus
    progress: int
    output_url: str | None = None
    error: str | None = None


class ChunkRenderDispatcher:
    """Renders single chunks on the remote backend with retry.

    ``render_chunk`` never raises for render failures; the outcome is carried
    by the returned ChunkRenderResult. Only cancellation propagates.
    """

    def __init__(
        self,
        renderer: RemoteRenderer | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.renderer = renderer or get_renderer_provider()
        self.retry_policy = retry_policy or RetryPolicy.from_settings()

    async def render_chunk(
        self,
        chunk: ChunkPlan,
        props: CompositionProps,
        composition_id: str,
        on_backend_progress: BackendProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ChunkRenderResult:
        """Render one chunk, retrying within the policy's attempt budget.

        Args:
            chunk: Planned chunk to render
            props: Shared composition properties
            composition_id: Composition to render
            on_backend_progress: Optional callback receiving backend percent
            cancel_event: Optional event that interrupts the render and waits

        Returns:
            ChunkRenderResult with the remote URL, or the last error after
            all attempts are exhausted

        Raises:
            RenderCancelledError: If the cancel event is set
        """
        logger.info(
            "chunk_render_started",
            chunk_index=chunk.chunk_index,
            scene_count=len(chunk.scenes),
            duration=round(chunk.duration_seconds, 3),
            renderer=self.renderer.name,
        )
        return await self.render_request(
            build_chunk_request(chunk, props, composition_id),
            on_backend_progress,
            cancel_event,
        )

    async def render_request(
        self,
        request: ChunkRenderRequest,
        on_backend_progress: BackendProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ChunkRenderResult:
        """Render a chunk or whole-video request with the retry policy.

        A whole-video request (no chunk index) is reported as chunk 0.
        """
        policy = self.retry_policy
        chunk_index = request.chunk_index if request.chunk_index is not None else 0
        started = time.monotonic()
        last_error = "Unknown error after all retries"

        for attempt in range(1, policy.max_attempts + 1):
            raise_if_cancelled(cancel_event)

            try:
                result = await self.renderer.render(request, on_backend_progress, cancel_event)
            except RenderCancelledError:
                raise
            except RenderConfigurationError as e:
                logger.error(
                    "chunk_render_misconfigured",
                    chunk_index=chunk_index,
                    error=str(e),
                )
                return ChunkRenderResult(
                    chunk_index=chunk_index,
                    success=False,
                    error=str(e),
                    render_time_seconds=time.monotonic() - started,
                    attempts=attempt,
                )
            except Exception as e:
                last_error = str(e) or type(e).__name__
            else:
                if result.success:
                    elapsed = time.monotonic() - started
                    logger.info(
                        "chunk_render_completed",
                        chunk_index=chunk_index,
                        attempt=attempt,
                        render_time_seconds=round(elapsed, 1),
                        output_url=(result.output_url or "")[:100],
                    )
                    return ChunkRenderResult(
                        chunk_index=chunk_index,
                        success=True,
                        remote_url=result.output_url,
                        render_time_seconds=elapsed,
                        attempts=attempt,
                    )
                last_error = result.error_message or "Unknown render error"

            if attempt >= policy.max_attempts:
                break

            kind = classify_render_error(last_error)
            delay = policy.delay_for(kind, attempt)
            if kind == RenderErrorKind.AUDIO_PLAYBACK:
                request = without_ambient_audio(request)

            logger.warning(
                "chunk_render_retrying",
                chunk_index=chunk_index,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                error_kind=str(kind),
                delay_seconds=delay,
                error=last_error[:300],
            )
            await wait(delay, cancel_event)

        elapsed = time.monotonic() - started
        logger.error(
            "chunk_render_failed",
            chunk_index=chunk_index,
            attempts=policy.max_attempts,
            render_time_seconds=round(elapsed, 1),
            error=last_error[:300],
        )
        return ChunkRenderResult(
            chunk_index=chunk_index,
            success=False,
            error=last_error,
            render_time_seconds=elapsed,
            attempts=policy.max_attempts,
        )

    async def check_chunk_render_status(self, handle: RenderHandle) -> ChunkStatusReport:
        """Look up a previously submitted chunk render once, without waiting.

        Used to resume a render after a worker restart.
        """
        try:
            status = await self.renderer.get_render_progress(handle)
        except RenderConfigurationError:
            raise
        except Exception as e:
            message = str(e)
            lowered = message.lower()
            if "not found" in lowered or "nosuchkey" in lowered or "does not exist" in lowered:
                return ChunkStatusReport(
                    status=ChunkStatus.NOT_FOUND,
                    progress=0,
                    error="Render not found on backend",
                )
            raise

        percent = round(status.overall_progress * 100)
        if status.errors:
            return ChunkStatusReport(
                status=ChunkStatus.FAILED,
                progress=percent,
                error=", ".join(status.errors),
            )
        if status.done and status.output_file:
            return ChunkStatusReport(
                status=ChunkStatus.COMPLETE,
                progress=100,
                output_url=status.output_file,
            )
        if status.done:
            return ChunkStatusReport(
                status=ChunkStatus.FAILED,
                progress=percent,
                error="Render completed but no output file generated",
            )
        return ChunkStatusReport(status=ChunkStatus.IN_PROGRESS, progress=percent)
