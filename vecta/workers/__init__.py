"""
Celery workers module.

Conversion worker pool and the periodic expiry reaper.

Delivery policy: tasks are acknowledged only after they finish
(acks_late) and requeued if the worker child dies, each child prefetches a
single message, and a message unacknowledged for conversion_timeout
seconds is redelivered.

Run:
    celery -A vecta.workers worker --loglevel=INFO
    celery -A vecta.workers beat --loglevel=INFO

Dependencies: celery, vecta.configs
System role: Background task processing
"""

from celery import Celery

from vecta.boundary.queue.conversion_queue import CONVERT_FILE_TASK
from vecta.configs import get_settings

CLEAN_EXPIRED_JOBS_TASK = "vecta.clean_expired_jobs"

settings = get_settings()
queue_config = settings.queue

celery_app = Celery(
    "vecta",
    broker=queue_config.broker_url,
    backend=queue_config.result_backend_url,
    include=[
        "vecta.workers.runtime",
        "vecta.workers.tasks.conversion",
        "vecta.workers.tasks.cleanup",
    ],
)

celery_app.conf.update(
    task_serializer=queue_config.task_serializer,
    result_serializer=queue_config.result_serializer,
    accept_content=queue_config.accept_content,
    timezone=queue_config.timezone,
    task_default_queue=queue_config.queue_name,
    task_routes={
        CONVERT_FILE_TASK: {"queue": queue_config.queue_name},
        CLEAN_EXPIRED_JOBS_TASK: {"queue": queue_config.queue_name},
    },
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_soft_time_limit=queue_config.conversion_timeout,
    task_time_limit=queue_config.conversion_timeout + queue_config.hard_time_limit_grace,
    task_max_retries=queue_config.max_attempts - 1,
    worker_prefetch_multiplier=1,
    worker_concurrency=queue_config.worker_concurrency,
    broker_transport_options={"visibility_timeout": queue_config.conversion_timeout},
    result_expires=3600,
    beat_schedule={
        "clean-expired-jobs": {
            "task": CLEAN_EXPIRED_JOBS_TASK,
            "schedule": float(queue_config.cleanup_interval_seconds),
        },
    },
)
