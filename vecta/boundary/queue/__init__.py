"""
Task queue producer.

Exports:
  - ConversionQueue: Enqueues conversion tasks onto the Celery broker
  - CONVERT_FILE_TASK: Registered task name consumed by workers
"""

from vecta.boundary.queue.conversion_queue import CONVERT_FILE_TASK, ConversionQueue

__all__ = ["CONVERT_FILE_TASK", "ConversionQueue"]
