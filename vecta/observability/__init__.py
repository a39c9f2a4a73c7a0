"""
Observability module.

Provides logging configuration, structured logging helpers, correlation ID
tracking and HTTP request logging middleware.
"""

from vecta.observability.logger import configure_logging

__all__ = ["configure_logging"]
