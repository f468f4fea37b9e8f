"""Structured reporting for failures that must not reach the caller."""

from typing import Any, Protocol

import structlog

from app.core.exceptions import AppException


class ErrorReporter(Protocol):
    """Receives failures from best-effort side effects."""

    def report(
        self,
        event: str,
        error: AppException,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        """Record a failure."""


class StructlogErrorReporter:
    """Error reporter that writes a structured log event."""

    def __init__(self, logger: Any | None = None):
        """Initialize reporter with an optional bound logger."""
        self.logger = logger or structlog.get_logger("app.reporting")

    def report(
        self,
        event: str,
        error: AppException,
        cause: BaseException | None = None,
        **context: Any,
    ) -> None:
        """
        Log the failure with its cause.

        Args:
            event: Snake-case event name
            error: Application error describing the failure
            cause: Underlying exception, rendered as a traceback
            **context: Extra key/value context (ids, hook name)
        """
        self.logger.error(
            event,
            error=error.message,
            error_type=error.__class__.__name__,
            exc_info=cause,
            **context,
        )
