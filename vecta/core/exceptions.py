"""
Exception hierarchy for Vecta Convert.

Every error kind carries a stable code and HTTP status so the API layer can
surface it without inspecting messages. Conversion and storage errors raised
inside a worker are recorded on the JobFile instead of reaching a caller.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class VectaError(Exception):
    """Base exception for all application errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ValidationError(VectaError):
    """Raised when input shape, size, format or filename is rejected."""

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(VectaError):
    """Raised for unknown jobs/files and for ownership mismatches."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str = "Resource", details: dict[str, Any] | None = None) -> None:
        super().__init__(f"{resource} not found", details)


class FileTooLargeError(VectaError):
    """Raised when a declared file exceeds the per-file size limit."""

    code = "FILE_TOO_LARGE"
    status_code = 413

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File exceeds limit: {size} bytes (max {limit} bytes)",
            {"size": size, "limit": limit},
        )


class RateLimitError(VectaError):
    """Raised when the daily usage cap is reached."""

    code = "RATE_LIMIT"
    status_code = 429


class ConversionError(VectaError):
    """Raised for corrupt/undecodable input or encoder failure."""

    code = "CONVERSION_ERROR"
    status_code = 500


class StorageError(VectaError):
    """Raised when an object storage operation fails."""

    code = "STORAGE_ERROR"
    status_code = 500

    def __init__(self, operation: str, key: str, cause: Exception | str) -> None:
        self.operation = operation
        self.key = key
        super().__init__(
            f"Failed to {operation} \"{key}\": {cause}",
            {"operation": operation, "key": key},
        )
