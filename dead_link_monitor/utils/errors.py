"""
Custom exception classes and error handling utilities.
"""

from typing import Optional, Dict, Any
import traceback


class DeadLinkMonitorError(Exception):
    """Base exception for all dead link monitor errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(DeadLinkMonitorError):
    """Exception raised for configuration-related issues."""
    pass


class ValidationError(DeadLinkMonitorError):
    """Exception raised for data validation failures."""
    pass


class ExtractionError(DeadLinkMonitorError):
    """Exception raised when a document cannot be read or parsed."""
    pass


class TransportError(DeadLinkMonitorError):
    """Exception raised when an HTTP exchange fails below the HTTP layer."""
    pass


class QueueClosedError(DeadLinkMonitorError):
    """Exception raised when a job is emitted into a closed queue."""
    pass


class ExportError(DeadLinkMonitorError):
    """Exception raised when a report destination cannot be written."""
    pass


def describe_error(error: BaseException, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a flat description of an error for logging.

    Args:
        error: The exception that occurred
        context: Additional context information

    Returns:
        Dictionary with error type, message and context
    """
    error_context = {
        "error_type": type(error).__name__,
        "error_message": str(error) or repr(error),
        **(context or {})
    }

    if isinstance(error, DeadLinkMonitorError):
        error_context.update(error.details)

    return error_context


def handle_error(
    error: Exception,
    logger,
    context: Optional[Dict[str, Any]] = None,
    reraise: bool = True
) -> None:
    """
    Handle and log errors with context information.

    Args:
        error: The exception that occurred
        logger: Logger instance to use for logging
        context: Additional context information
        reraise: Whether to reraise the exception after logging
    """
    error_context = describe_error(error, context)
    error_context["traceback"] = traceback.format_exc()

    logger.error("Error occurred: %s", error_context)

    if reraise:
        raise error
