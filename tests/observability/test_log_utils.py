"""Tests for exception logging helpers."""

import logging

from vecta.core.exceptions import StorageError
from vecta.observability.log_utils import MAX_CONTEXT_VALUE_LENGTH, log_exception_with_context

logger = logging.getLogger("tests.log_utils")


class TestLogExceptionWithContext:
    """Tests for log_exception_with_context."""

    def test_domain_error_should_carry_code(self, caplog) -> None:
        """VectaError subclasses add their stable code."""
        error = StorageError("bulk delete", "inputs/job/a.png", "AccessDenied")

        with caplog.at_level(logging.ERROR, logger="tests.log_utils"):
            log_exception_with_context(logger, "Failed to clean expired job", error, job_id="job-1")

        record = caplog.records[-1]
        assert record.message == "Failed to clean expired job"
        assert record.error_code == "STORAGE_ERROR"
        assert record.error_type == "StorageError"
        assert record.job_id == "job-1"
        assert record.exc_info[1] is error

    def test_plain_exception_should_have_no_code(self, caplog) -> None:
        """Non-domain exceptions are logged without error_code."""
        with caplog.at_level(logging.ERROR, logger="tests.log_utils"):
            log_exception_with_context(logger, "Failed", RuntimeError("boom"))

        record = caplog.records[-1]
        assert record.error == "boom"
        assert not hasattr(record, "error_code")

    def test_long_values_should_be_truncated(self, caplog) -> None:
        """Context strings are cut to keep log lines bounded."""
        with caplog.at_level(logging.ERROR, logger="tests.log_utils"):
            log_exception_with_context(logger, "Failed", ValueError("x"), detail="y" * 1000)

        detail = caplog.records[-1].detail
        assert len(detail) == MAX_CONTEXT_VALUE_LENGTH + 3
        assert detail.endswith("...")
