"""Chunk planning: partition a scene list into time-bounded render units.

Scenes are never split. A chunk closes before the scene that would push it
strictly past the maximum duration, so a chunk landing exactly on the maximum
is kept whole. A single scene longer than the maximum forms its own chunk.
"""

from collections.abc import Sequence

from longform_engine.config import settings
from longform_engine.domain.models import ChunkPlan, ChunkScene, Scene
from longform_engine.logging import get_logger

logger = get_logger(__name__)


def total_duration(scenes: Sequence[Scene]) -> float:
    """Sum of scene durations in seconds."""
    return sum(s.duration_seconds for s in scenes)


def should_use_chunked_rendering(
    scenes: Sequence[Scene],
    threshold_seconds: float | None = None,
) -> bool:
    """Return True if the video is long enough to need chunked rendering."""
    threshold = (
        threshold_seconds if threshold_seconds is not None else settings.chunk_threshold_seconds
    )
    return total_duration(scenes) > threshold


def plan_chunks(
    scenes: Sequence[Scene],
    fps: int,
    max_chunk_duration_seconds: float,
) -> list[ChunkPlan]:
    """Partition ordered scenes into contiguous chunks.

    Args:
        scenes: Ordered scenes of the whole video
        fps: Frame rate used to convert durations to frames
        max_chunk_duration_seconds: Upper bound on a chunk's total duration

    Returns:
        Chunks in order; empty if there are no scenes

    Raises:
        ValueError: If fps or the maximum duration is not positive
    """
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    if max_chunk_duration_seconds <= 0:
        raise ValueError(
            f"max_chunk_duration_seconds must be positive, got {max_chunk_duration_seconds}"
        )

    chunks: list[ChunkPlan] = []
    if not scenes:
        return chunks

    current: list[ChunkScene] = []
    chunk_duration = 0.0
    chunk_frames = 0
    chunk_start_frame = 0
    chunk_start_time = 0.0
    global_frame = 0
    global_time = 0.0

    for scene in scenes:
        if current and chunk_duration + scene.duration_seconds > max_chunk_duration_seconds:
            chunks.append(
                ChunkPlan(
                    chunk_index=len(chunks),
                    start_frame=chunk_start_frame,
                    end_frame=global_frame - 1,
                    start_time_seconds=chunk_start_time,
                    end_time_seconds=global_time,
                    scenes=current,
                )
            )
            current = []
            chunk_duration = 0.0
            chunk_frames = 0
            chunk_start_frame = global_frame
            chunk_start_time = global_time

        scene_frames = round(scene.duration_seconds * fps)
        current.append(ChunkScene(scene=scene, chunk_start_frame=chunk_frames))
        chunk_duration += scene.duration_seconds
        chunk_frames += scene_frames
        global_frame += scene_frames
        global_time += scene.duration_seconds

    chunks.append(
        ChunkPlan(
            chunk_index=len(chunks),
            start_frame=chunk_start_frame,
            end_frame=global_frame - 1,
            start_time_seconds=chunk_start_time,
            end_time_seconds=global_time,
            scenes=current,
        )
    )

    logger.info(
        "chunks_planned",
        scene_count=len(scenes),
        chunk_count=len(chunks),
        total_duration=round(global_time, 3),
        max_chunk_duration=max_chunk_duration_seconds,
    )
    for chunk in chunks:
        logger.debug(
            "chunk_planned",
            chunk_index=chunk.chunk_index,
            scene_count=len(chunk.scenes),
            duration=round(chunk.duration_seconds, 3),
            start_frame=chunk.start_frame,
            end_frame=chunk.end_frame,
        )

    return chunks


class ChunkPlanner:
    """Chunk planner bound to configured defaults."""

    def __init__(
        self,
        max_chunk_duration_seconds: float | None = None,
        threshold_seconds: float | None = None,
    ) -> None:
        self.max_chunk_duration_seconds = (
            max_chunk_duration_seconds
            if max_chunk_duration_seconds is not None
            else settings.max_chunk_duration_seconds
        )
        self.threshold_seconds = (
            threshold_seconds if threshold_seconds is not None else settings.chunk_threshold_seconds
        )

    def plan(self, scenes: Sequence[Scene], fps: int | None = None) -> list[ChunkPlan]:
        return plan_chunks(scenes, fps or settings.default_fps, self.max_chunk_duration_seconds)

    def should_chunk(self, scenes: Sequence[Scene]) -> bool:
        return should_use_chunked_rendering(scenes, self.threshold_seconds)
