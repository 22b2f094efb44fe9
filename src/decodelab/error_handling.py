"""Standardized Error Handling Utilities

Provides the error taxonomy of a decode run and consistent error handling
patterns so that every failure surfaces as one printed diagnostic.
"""

from __future__ import annotations

import logging
import traceback
from contextlib import contextmanager
from enum import Enum
from typing import Any


class ErrorLevel(Enum):
    """Error severity levels for consistent logging."""

    DEBUG = "debug"
    ERROR = "error"


class DecodeLabError(Exception):
    """Base exception class for all decodelab errors."""

    def __init__(
        self, message: str, cause: Exception | None = None, context: dict | None = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.cause:
            return f"{base_msg} (caused by: {self.cause})"
        return base_msg


class ValidationError(DecodeLabError):
    """Raised when a flag combination is invalid; the run aborts before decoding."""

    pass


class DecodeFailure(DecodeLabError):
    """Raised when the codec rejects the bitstream."""

    pass


class UnsupportedOutputFormat(DecodeLabError):
    """Raised when an output extension cannot be mapped to an encoder."""

    pass


class EncodeFailure(DecodeLabError):
    """Raised when the output encoder cannot produce its bitstreams."""

    pass


class AlphaBlendFailed(DecodeLabError):
    """Raised when the decoded buffer cannot be alpha blended."""

    pass


class WriteFailure(DecodeLabError):
    """Raised when storage rejects a write. Earlier writes are kept."""

    pass


class InvalidColorSpec(DecodeLabError):
    """Raised when a background color specification is malformed."""

    pass


def handle_error(
    error: Exception,
    operation: str,
    error_type: type[DecodeLabError] = DecodeFailure,
    level: ErrorLevel = ErrorLevel.ERROR,
    context: dict | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """Standardized error handling with consistent logging and error transformation.

    Args:
        error: Original exception that occurred
        operation: Description of operation that failed
        error_type: Type of DecodeLabError to raise
        level: Logging level for the error
        context: Additional context information
        logger: Logger to use (defaults to module logger)

    Raises:
        DecodeLabError: Always, as the transformed error
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    message = f"Failed to {operation}: {error}"

    error_context = dict(context or {})
    error_context.update(
        {
            "operation": operation,
            "original_error_type": type(error).__name__,
        }
    )

    transformed_error = error_type(message, cause=error, context=error_context)

    log_message = f"{operation.capitalize()} failed: {error}"
    context_str = ", ".join(
        f"{k}={v}" for k, v in error_context.items() if k != "operation"
    )
    if context_str:
        log_message += f" (context: {context_str})"

    log_func = getattr(logger, level.value)
    log_func(log_message)

    if level is ErrorLevel.ERROR:
        logger.debug(f"Traceback for {operation}: {traceback.format_exc()}")

    raise transformed_error from error


@contextmanager
def error_context(
    operation: str,
    error_type: type[DecodeLabError] = DecodeFailure,
    level: ErrorLevel = ErrorLevel.ERROR,
    context: dict | None = None,
    logger: logging.Logger | None = None,
) -> Any:
    """Context manager for standardized error handling.

    Usage:
        with error_context("encode image", EncodeFailure, context={"ext": ".png"}):
            risky_operation()

    decodelab errors pass through unchanged; anything else is wrapped in
    ``error_type``.
    """
    try:
        yield
    except DecodeLabError:
        raise
    except Exception as e:
        handle_error(e, operation, error_type, level, context, logger)


def log_warning_with_context(
    message: str, context: dict | None = None, logger: logging.Logger | None = None
) -> None:
    """Log *message* as a warning, followed by its context as key=value pairs."""
    if logger is None:
        logger = logging.getLogger(__name__)

    warning_msg = message
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        warning_msg += f" (context: {context_str})"

    logger.warning(warning_msg)
