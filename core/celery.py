"""
Background workers for design analyses.

Analyses can take a minute or more (screenshot upload plus one model call with
fallbacks), so /analyze/async hands them to a Celery worker and the client
polls /analyze/status/{task_id}. Redis serves as both broker and result store.

Start a worker with:
    celery -A core.celery worker --loglevel=info -Q analysis
"""

import logging

from celery import Celery
from celery.signals import task_failure, task_prerun, worker_ready
from kombu import Queue

from config import settings

logger = logging.getLogger(__name__)

ANALYSIS_QUEUE = "analysis"


def create_celery_app() -> Celery:
    """Build the Celery app that runs tasks.analysis on the analysis queue."""
    app = Celery(
        "design_advisor",
        broker=settings.celery_broker,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["tasks.analysis"],
    )

    app.conf.update(
        # Payloads and context maps are plain JSON
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        enable_utc=True,
        # An analysis whose worker dies is re-queued, never lost
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        # STARTED lets the status endpoint tell queued from running
        task_track_started=True,
        task_time_limit=settings.TASK_TIME_LIMIT,
        task_soft_time_limit=settings.TASK_SOFT_TIME_LIMIT,
        # Ranked payloads stay pollable until they expire
        result_expires=settings.CELERY_RESULT_EXPIRES,
        result_extended=True,
        # One slow model call per worker process at a time
        worker_prefetch_multiplier=1,
        worker_max_tasks_per_child=settings.WORKER_MAX_TASKS_PER_CHILD,
        task_default_queue=ANALYSIS_QUEUE,
        task_queues=(Queue(ANALYSIS_QUEUE, routing_key="design.analysis"),),
        task_routes={"tasks.analyze_design": {"queue": ANALYSIS_QUEUE}},
        broker_connection_retry_on_startup=True,
    )
    return app


celery_app = create_celery_app()


@worker_ready.connect
def log_worker_ready(sender=None, **kwargs):
    logger.info(f"🚀 Analysis worker ready on queue '{ANALYSIS_QUEUE}'")


@task_prerun.connect
def log_analysis_start(sender=None, task_id=None, task=None, args=None, kwargs=None, **extra):
    url = (kwargs or {}).get("url") or (args[0] if args else None)
    logger.info(f"⏳ {task.name} [{task_id}] picked up for {url or 'uploaded screenshots'}")


@task_failure.connect
def log_analysis_failure(sender=None, task_id=None, exception=None, **kwargs):
    logger.error(f"❌ {sender.name} [{task_id}] failed: {exception}")
