"""Long-video render orchestration.

Sequences planning, per-chunk dispatch and assembly into one render:

    preparing -> rendering -> downloading -> concatenating -> uploading -> complete

with ``error`` reachable from any phase. Local temp files (downloaded chunks
and the concatenated output) are deleted on every exit path.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from longform_engine.config import settings
from longform_engine.domain.enums import RenderPhase
from longform_engine.domain.models import ChunkPlan, ChunkRenderResult, RenderProgress
from longform_engine.domain.render_request import CompositionProps, build_full_request
from longform_engine.exceptions import ChunkRenderError, RenderBackendError
from longform_engine.logging import get_logger, render_context
from longform_engine.services.chunk_assembler import ChunkAssembler
from longform_engine.services.chunk_dispatcher import ChunkRenderDispatcher
from longform_engine.services.chunk_planner import ChunkPlanner
from longform_engine.utils.async_utils import raise_if_cancelled, wait

logger = get_logger(__name__)

ProgressCallback = Callable[[RenderProgress], None]
ChunkStartedHook = Callable[[int], Awaitable[None]]
ChunkCompleteHook = Callable[[ChunkRenderResult], Awaitable[None]]

# Backend progress interpolation never reports the download phase early
RENDERING_PERCENT_CAP = 59


def rendering_percent(completed: int, total: int) -> int:
    return 10 + round(completed / total * 50)


def downloading_percent(index: int, total: int) -> int:
    return 60 + round(index / total * 15)


class _ProgressReporter:
    """Logs progress snapshots and forwards them to an optional callback."""

    def __init__(self, callback: ProgressCallback | None) -> None:
        self.callback = callback

    def __call__(
        self,
        phase: RenderPhase,
        total_chunks: int,
        completed_chunks: int,
        overall_percent: int,
        message: str,
        current_chunk: int | None = None,
        error: str | None = None,
    ) -> None:
        progress = RenderProgress(
            phase=phase,
            total_chunks=total_chunks,
            completed_chunks=completed_chunks,
            overall_percent=overall_percent,
            message=message,
            current_chunk=current_chunk,
            error=error,
        )
        logger.info(
            "render_progress",
            phase=str(phase),
            percent=overall_percent,
            message=message,
        )
        if self.callback is None:
            return
        try:
            self.callback(progress)
        except Exception as e:
            logger.warning("progress_callback_failed", error=str(e))


class RenderOrchestrator:
    """Renders long videos as independently rendered chunks joined together."""

    def __init__(
        self,
        dispatcher: ChunkRenderDispatcher | None = None,
        assembler: ChunkAssembler | None = None,
        planner: ChunkPlanner | None = None,
        cooldown_seconds: float | None = None,
        max_concurrent_chunks: int | None = None,
    ) -> None:
        self.dispatcher = dispatcher or ChunkRenderDispatcher()
        self.assembler = assembler or ChunkAssembler()
        self.planner = planner or ChunkPlanner()
        self.cooldown_seconds = (
            cooldown_seconds
            if cooldown_seconds is not None
            else settings.inter_chunk_cooldown_seconds
        )
        self.max_concurrent_chunks = max(
            1, max_concurrent_chunks or settings.max_concurrent_chunks
        )

    async def render_video(
        self,
        project_id: str,
        props: CompositionProps,
        composition_id: str | None = None,
        on_progress: ProgressCallback | None = None,
        on_chunk_started: ChunkStartedHook | None = None,
        on_chunk_complete: ChunkCompleteHook | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Render a video, chunking only when it is longer than the threshold.

        Short videos are rendered as one unit, with the same retry policy as
        chunks, and the backend's output URL is returned as-is.
        """
        composition_id = composition_id or settings.default_composition_id
        if not props.scenes:
            raise ValueError("Cannot render a video without scenes")

        if self.planner.should_chunk(props.scenes):
            return await self.render_long_video(
                project_id,
                props,
                composition_id,
                on_progress=on_progress,
                on_chunk_started=on_chunk_started,
                on_chunk_complete=on_chunk_complete,
                cancel_event=cancel_event,
            )

        with render_context(project_id=project_id):
            report = _ProgressReporter(on_progress)
            try:
                report(RenderPhase.PREPARING, 1, 0, 5, "Preparing render...")
                report(RenderPhase.RENDERING, 1, 0, 10, "Rendering video...")
                result = await self.dispatcher.render_request(
                    build_full_request(props, composition_id),
                    lambda pct: report(
                        RenderPhase.RENDERING,
                        1,
                        0,
                        min(10 + round(pct * 0.85), 95),
                        f"Rendering video ({pct}%)...",
                    ),
                    cancel_event,
                )
                if not result.success or not result.remote_url:
                    raise RenderBackendError(
                        f"Render failed after {result.attempts} attempts: "
                        f"{result.error or 'no output generated'}"
                    )
            except Exception as e:
                report(RenderPhase.ERROR, 0, 0, 0, "Render failed", error=str(e))
                raise

            report(RenderPhase.COMPLETE, 1, 1, 100, "Video rendering complete!")
            return result.remote_url

    async def render_long_video(
        self,
        project_id: str,
        props: CompositionProps,
        composition_id: str,
        on_progress: ProgressCallback | None = None,
        on_chunk_started: ChunkStartedHook | None = None,
        on_chunk_complete: ChunkCompleteHook | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Render a long video chunk by chunk and return the final video URL.

        Args:
            project_id: Logical id used to name temp files and the upload key
            props: Shared composition properties with the full scene list
            composition_id: Composition to render
            on_progress: Optional progress sink; its failures are only logged
            on_chunk_started: Awaited before each chunk is dispatched
            on_chunk_complete: Awaited with each successful chunk result
            cancel_event: Optional event that interrupts the render

        Raises:
            ChunkRenderError: If any chunk exhausts its retries
            StorageError: If a download or the upload fails
            ConcatenationError: If chunks cannot be joined
            RenderCancelledError: If the render was cancelled
        """
        with render_context(project_id=project_id):
            report = _ProgressReporter(on_progress)
            temp_files: list[Path] = []

            try:
                report(RenderPhase.PREPARING, 0, 0, 5, "Calculating chunks...")
                chunks = self.planner.plan(props.scenes, props.fps)
                total = len(chunks)
                if total == 0:
                    raise ValueError("Cannot render a video without scenes")

                report(RenderPhase.RENDERING, total, 0, 10, f"Starting render of {total} chunks...")

                if self.max_concurrent_chunks > 1:
                    results = await self._render_concurrently(
                        chunks, props, composition_id, report, on_chunk_started,
                        on_chunk_complete, cancel_event,
                    )
                else:
                    results = await self._render_sequentially(
                        chunks, props, composition_id, report, on_chunk_started,
                        on_chunk_complete, cancel_event,
                    )

                return await self._assemble(
                    project_id, results, total, report, temp_files, cancel_event
                )
            except Exception as e:
                report(RenderPhase.ERROR, 0, 0, 0, "Render failed", error=str(e))
                logger.error("long_video_render_failed", error=str(e))
                raise
            finally:
                self.assembler.cleanup(temp_files)

    async def resume_from_completed_chunks(
        self,
        project_id: str,
        completed: Sequence[ChunkRenderResult],
        total_chunks: int,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Assemble chunks rendered by an earlier, interrupted run.

        Rendering is skipped; results are assembled in chunk-index order.
        """
        with render_context(project_id=project_id):
            report = _ProgressReporter(on_progress)
            temp_files: list[Path] = []
            ordered = sorted(completed, key=lambda r: r.chunk_index)

            try:
                missing = [r.chunk_index for r in ordered if not r.success or not r.remote_url]
                if missing or len(ordered) != total_chunks:
                    raise ValueError(
                        f"Cannot resume: expected {total_chunks} completed chunks, "
                        f"got {len(ordered) - len(missing)}"
                    )
                return await self._assemble(
                    project_id, ordered, total_chunks, report, temp_files, cancel_event
                )
            except Exception as e:
                report(RenderPhase.ERROR, 0, 0, 0, "Render failed", error=str(e))
                logger.error("resume_render_failed", error=str(e))
                raise
            finally:
                self.assembler.cleanup(temp_files)

    async def _render_sequentially(
        self,
        chunks: list[ChunkPlan],
        props: CompositionProps,
        composition_id: str,
        report: _ProgressReporter,
        on_chunk_started: ChunkStartedHook | None,
        on_chunk_complete: ChunkCompleteHook | None,
        cancel_event: asyncio.Event | None,
    ) -> list[ChunkRenderResult]:
        total = len(chunks)
        results: list[ChunkRenderResult] = []

        for i, chunk in enumerate(chunks):
            if i > 0 and self.cooldown_seconds > 0:
                logger.debug("inter_chunk_cooldown", seconds=self.cooldown_seconds)
                await wait(self.cooldown_seconds, cancel_event)

            report(
                RenderPhase.RENDERING,
                total,
                i,
                rendering_percent(i, total),
                f"Rendering chunk {i + 1} of {total}...",
                current_chunk=i,
            )

            def on_backend_progress(pct: int, i: int = i) -> None:
                overall = 10 + round((i + pct / 100) / total * 50)
                report(
                    RenderPhase.RENDERING,
                    total,
                    i,
                    min(overall, RENDERING_PERCENT_CAP),
                    f"Rendering chunk {i + 1} of {total} ({pct}%)...",
                    current_chunk=i,
                )

            result = await self._render_one(
                chunk, total, props, composition_id, on_backend_progress,
                on_chunk_started, on_chunk_complete, cancel_event,
            )
            results.append(result)

        return results

    async def _render_concurrently(
        self,
        chunks: list[ChunkPlan],
        props: CompositionProps,
        composition_id: str,
        report: _ProgressReporter,
        on_chunk_started: ChunkStartedHook | None,
        on_chunk_complete: ChunkCompleteHook | None,
        cancel_event: asyncio.Event | None,
    ) -> list[ChunkRenderResult]:
        total = len(chunks)
        semaphore = asyncio.Semaphore(self.max_concurrent_chunks)
        done = 0

        async def run(chunk: ChunkPlan) -> ChunkRenderResult:
            nonlocal done
            async with semaphore:
                result = await self._render_one(
                    chunk, total, props, composition_id, None,
                    on_chunk_started, on_chunk_complete, cancel_event,
                )
            done += 1
            report(
                RenderPhase.RENDERING,
                total,
                done,
                rendering_percent(done, total) if done < total else RENDERING_PERCENT_CAP,
                f"Rendered {done} of {total} chunks",
                current_chunk=chunk.chunk_index,
            )
            return result

        tasks = [asyncio.create_task(run(chunk)) for chunk in chunks]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return sorted(results, key=lambda r: r.chunk_index)

    async def _render_one(
        self,
        chunk: ChunkPlan,
        total: int,
        props: CompositionProps,
        composition_id: str,
        on_backend_progress: Callable[[int], None] | None,
        on_chunk_started: ChunkStartedHook | None,
        on_chunk_complete: ChunkCompleteHook | None,
        cancel_event: asyncio.Event | None,
    ) -> ChunkRenderResult:
        raise_if_cancelled(cancel_event)
        if on_chunk_started is not None:
            await on_chunk_started(chunk.chunk_index)

        result = await self.dispatcher.render_chunk(
            chunk, props, composition_id, on_backend_progress, cancel_event
        )
        if not result.success:
            raise ChunkRenderError(
                chunk.chunk_index,
                total,
                result.attempts,
                result.error or "Unknown error",
            )

        if on_chunk_complete is not None:
            await on_chunk_complete(result)
        return result

    async def _assemble(
        self,
        project_id: str,
        results: Sequence[ChunkRenderResult],
        total: int,
        report: _ProgressReporter,
        temp_files: list[Path],
        cancel_event: asyncio.Event | None,
    ) -> str:
        report(RenderPhase.DOWNLOADING, total, total, 60, "Downloading rendered chunks...")

        local_paths: list[Path] = []
        for i, result in enumerate(results):
            raise_if_cancelled(cancel_event)
            report(
                RenderPhase.DOWNLOADING,
                total,
                total,
                downloading_percent(i, total),
                f"Downloading chunk {i + 1} of {total}...",
                current_chunk=i,
            )
            local_path = await self.assembler.download(result.remote_url or "", result.chunk_index)
            result.local_path = local_path
            local_paths.append(local_path)
            temp_files.append(local_path)

        raise_if_cancelled(cancel_event)
        report(RenderPhase.CONCATENATING, total, total, 80, "Concatenating video chunks...")
        output_path = self.assembler.output_path(project_id)
        temp_files.append(output_path)
        await self.assembler.concatenate(local_paths, output_path)

        raise_if_cancelled(cancel_event)
        report(RenderPhase.UPLOADING, total, total, 90, "Uploading final video...")
        final_url = await self.assembler.upload(output_path, project_id)

        report(RenderPhase.COMPLETE, total, total, 100, "Video rendering complete!")
        logger.info("long_video_render_completed", url=final_url)
        return final_url
