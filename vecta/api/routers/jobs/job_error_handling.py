"""
Job error handling utilities.

Decorator for consistent error handling across job and limits endpoints:
domain errors become HTTPExceptions carrying {code, message}.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from vecta.core.exceptions import VectaError

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def error_detail(code: str, message: str) -> dict[str, str]:
    return {"code": code, "message": message}


def handle_job_errors(func: F) -> F:
    """
    Decorator to handle job-related errors and transform them into HTTPExceptions.

    This centralizes:
    - Logging of errors with context
    - Mapping VectaError subclasses to their HTTP status codes
    - Hiding unexpected errors behind a generic INTERNAL_ERROR
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except VectaError as e:
            log = logger.warning if e.status_code < 500 else logger.error
            log(
                "Job request rejected",
                extra={"code": e.code, "error": e.message, **e.details},
            )
            raise HTTPException(
                status_code=e.status_code,
                detail=error_detail(e.code, e.message),
            )

        except Exception as e:
            logger.exception(
                "Unexpected failure in job operation",
                extra={"error": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=error_detail("INTERNAL_ERROR", "Internal server error"),
            )

    return wrapper  # type: ignore
