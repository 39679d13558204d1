"""
Error handling utilities for the resolution engine.

Provides a small error taxonomy with error codes so the deploy hooks can
report failures with enough context (domain, hint, action) to diagnose them.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Application error with error code and message.

    Base class for every failure the plugin reports to its host.
    """

    def __init__(self, error_code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the deploy summary."""
        return {
            "errorCode": self.error_code,
            "message": self.message,
            **self.details,
        }


class ErrorCode:
    """Standard error codes for the plugin."""

    # Resolution errors
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Provider errors
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"

    # Invalidation polling
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"


class NotFoundError(AppError):
    """No candidate satisfied the match."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.NOT_FOUND, message, details)


class InvalidArgumentError(AppError):
    """Malformed action or missing required input."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, details)


class ProviderUnavailableError(AppError):
    """A directory call failed or returned data that could not be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.PROVIDER_UNAVAILABLE, message, details)


class InvalidationTimeoutError(AppError):
    """Invalidation polling exceeded its deadline."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.TIMEOUT, message, details)


class InvalidationCancelledError(AppError):
    """The caller stopped waiting for an invalidation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.CANCELLED, message, details)
