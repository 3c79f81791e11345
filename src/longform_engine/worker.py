"""Celery worker configuration."""

from celery import Celery

from longform_engine.config import settings
from longform_engine.logging import setup_logging

# Setup logging before anything else
setup_logging()

celery_app = Celery(
    "longform_engine",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["longform_engine.jobs.render_tasks"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution; long renders can run for the better part of an hour
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=3600,
    task_soft_time_limit=3300,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=2,
    # Result backend
    result_expires=86400,  # 24 hours
    # Task routing
    task_routes={
        "render.long_video": {"queue": "render"},
        "render.plan_chunks": {"queue": "default"},
    },
)
