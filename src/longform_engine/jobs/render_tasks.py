"""Render Celery tasks.

Chunk retries, backoff and cleanup happen inside the orchestrator, so the
tasks themselves never retry; a failed render is reported in the result dict.
"""

from typing import Any

from longform_engine.config import settings
from longform_engine.domain.render_request import CompositionProps
from longform_engine.exceptions import LongformEngineError
from longform_engine.logging import get_logger, render_context
from longform_engine.services.chunk_planner import ChunkPlanner
from longform_engine.services.render_orchestrator import RenderOrchestrator
from longform_engine.utils.async_utils import run_async
from longform_engine.worker import celery_app

logger = get_logger(__name__)


@celery_app.task(
    bind=True,
    name="render.long_video",
    max_retries=0,  # Retries are handled per chunk
)
def render_long_video_task(
    self: Any,
    project_id: str,
    input_props: dict[str, Any],
    composition_id: str | None = None,
) -> dict[str, Any]:
    """Render a video, in chunks when it is longer than the chunk threshold.

    Args:
        project_id: Logical id used for temp file names and the upload key
        input_props: Composition input props (scenes, fps, sound design, ...)
        composition_id: Composition to render (defaults to the configured one)

    Returns:
        Dict with success status and the final video URL or error
    """
    with render_context(task_id=self.request.id, project_id=project_id):
        return _render_long_video(project_id, input_props, composition_id)


def _render_long_video(
    project_id: str,
    input_props: dict[str, Any],
    composition_id: str | None,
) -> dict[str, Any]:
    props = CompositionProps.from_dict(input_props, default_fps=settings.default_fps)

    logger.info(
        "render_long_video_started",
        scene_count=len(props.scenes),
        duration_seconds=props.total_duration_seconds,
    )

    if not props.scenes:
        return {
            "success": False,
            "project_id": project_id,
            "error": "No scenes to render",
        }

    try:
        url = run_async(RenderOrchestrator().render_video(project_id, props, composition_id))
    except LongformEngineError as e:
        logger.error("render_long_video_failed", error=str(e))
        return {
            "success": False,
            "project_id": project_id,
            "error": str(e),
        }

    logger.info("render_long_video_completed", url=url)
    return {
        "success": True,
        "project_id": project_id,
        "url": url,
    }


@celery_app.task(bind=True, name="render.plan_chunks")
def plan_chunks_task(
    self: Any,  # noqa: ARG001
    input_props: dict[str, Any],
    max_chunk_duration_seconds: float | None = None,
) -> dict[str, Any]:
    """Plan the chunks a video would be rendered in, without rendering.

    Returns:
        Dict with the chunked flag and the serialized chunk plans
    """
    props = CompositionProps.from_dict(input_props, default_fps=settings.default_fps)
    planner = ChunkPlanner(max_chunk_duration_seconds=max_chunk_duration_seconds)
    chunks = planner.plan(props.scenes, props.fps)

    return {
        "chunked": planner.should_chunk(props.scenes),
        "total_duration_seconds": props.total_duration_seconds,
        "chunks": [chunk.to_dict() for chunk in chunks],
    }
