"""
Conversion queue producer.

Publishes one message per file by task name, so the API process never
imports worker code. Broker durability, acknowledgement and retry policy
are configured on the Celery app (vecta.workers).

Dependencies: celery
System role: Durable hand-off from the API to the worker pool
"""

import logging
from typing import Iterable

from celery import Celery

from vecta.models.task import ConversionTask

logger = logging.getLogger(__name__)

CONVERT_FILE_TASK = "vecta.convert_file"


class ConversionQueue:
    """Thin producer over a Celery app."""

    def __init__(self, celery_app: Celery, queue_name: str) -> None:
        self._app = celery_app
        self._queue_name = queue_name

    @property
    def queue_name(self) -> str:
        return self._queue_name

    def enqueue(self, task: ConversionTask) -> str:
        """
        Publish one conversion task.

        Returns:
            str: Celery task id
        """
        result = self._app.send_task(
            CONVERT_FILE_TASK,
            args=[task.model_dump(mode="json")],
            queue=self._queue_name,
        )
        logger.debug(
            "Conversion task enqueued",
            extra={"job_id": str(task.job_id), "file_id": str(task.file_id), "task_id": result.id},
        )
        return result.id

    def enqueue_many(self, tasks: Iterable[ConversionTask]) -> list[str]:
        return [self.enqueue(task) for task in tasks]
