"""
Exception logging for background work.

Used where a failure is logged and the loop moves on (reaper jobs,
analytics writes). Domain errors contribute their stable code so log
queries can group by it.

Dependencies: logging (stdlib)
System role: Error-boundary logging helper
"""

import logging
from typing import Any

MAX_CONTEXT_VALUE_LENGTH = 200


def _context_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    text = str(value)
    if len(text) > MAX_CONTEXT_VALUE_LENGTH:
        return text[:MAX_CONTEXT_VALUE_LENGTH] + "..."
    return text


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log a caught exception at ERROR with its traceback and context.

    Args:
        logger: Module logger
        message: Log message
        exc: The caught exception
        **context: Identifiers such as job_id or file_id
    """
    extra = {key: _context_value(value) for key, value in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error"] = _context_value(str(exc))
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        extra["error_code"] = code
    logger.error(message, exc_info=exc, extra=extra)
