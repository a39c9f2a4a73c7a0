"""
Image conversion Celery task.

Task: convert_file(payload) with one ConversionTask per message.
Flow: validate payload -> ConversionService.process -> on error retry with
exponential backoff until the attempt cap, then record the failure on the
JobFile and count it on the job. The task itself never fails permanently;
its outcome lives in the job store.

Dependencies: celery, vecta.application, vecta.workers
System role: Conversion worker entry point
"""

import logging

from pydantic import ValidationError as PayloadValidationError

from vecta.application.services.conversion_service import ConversionService
from vecta.boundary.queue.conversion_queue import CONVERT_FILE_TASK
from vecta.configs import get_settings
from vecta.models.task import ConversionTask
from vecta.workers import celery_app, queue_config
from vecta.workers.runtime import get_worker_storage, run_async, worker_session

logger = logging.getLogger(__name__)


def retry_countdown(retries: int, backoff_base: float) -> float:
    """Delay before the next attempt: base, 2*base, 4*base, ..."""
    return backoff_base * (2 ** retries)


async def _process(task: ConversionTask):
    async with worker_session() as db:
        service = ConversionService(db, get_worker_storage(), get_settings().conversion)
        return await service.process(task)


async def _record_failure(task: ConversionTask, error_message: str):
    async with worker_session() as db:
        service = ConversionService(db, get_worker_storage(), get_settings().conversion)
        return await service.record_failure(task, error_message)


@celery_app.task(
    bind=True,
    name=CONVERT_FILE_TASK,
    max_retries=queue_config.max_attempts - 1,
    acks_late=True,
    reject_on_worker_lost=True,
)
def convert_file(self, payload: dict) -> dict:
    """
    Convert one file.

    Args:
        payload: ConversionTask serialized as JSON

    Returns:
        dict: {"status": "completed" | "skipped" | "failed" | "rejected", ...}
    """
    try:
        task = ConversionTask.model_validate(payload)
    except PayloadValidationError as e:
        logger.error("Discarding malformed conversion task", extra={"error": str(e)})
        return {"status": "rejected", "error": str(e)}

    attempt = self.request.retries + 1
    log_context = {"job_id": str(task.job_id), "file_id": str(task.file_id), "attempt": attempt}
    if attempt > 1:
        logger.warning("Retrying conversion", extra=log_context)

    try:
        metadata = run_async(_process(task))
    except Exception as exc:
        if self.request.retries < self.max_retries:
            countdown = retry_countdown(self.request.retries, queue_config.retry_backoff_base)
            logger.warning(
                "Conversion attempt failed, scheduling retry",
                extra={**log_context, "countdown": countdown, "error": str(exc)},
            )
            raise self.retry(exc=exc, countdown=countdown)

        logger.error(
            "Conversion attempts exhausted",
            extra={**log_context, "max_attempts": self.max_retries + 1, "error": str(exc)},
        )
        run_async(_record_failure(task, str(exc)))
        return {"status": "failed", "file_id": str(task.file_id), "error": str(exc)}

    if metadata is None:
        return {"status": "skipped", "file_id": str(task.file_id)}
    return {
        "status": "completed",
        "file_id": str(task.file_id),
        "output_size": metadata.output_size,
        "warnings": metadata.warnings,
    }
