"""Celery job definitions."""

from longform_engine.jobs.render_tasks import plan_chunks_task, render_long_video_task

__all__ = [
    "plan_chunks_task",
    "render_long_video_task",
]
