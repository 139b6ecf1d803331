"""
================================================================================
Framework Exceptions
================================================================================

Small exception taxonomy that low-level driver errors are mapped to.

Hierarchy:
    FrameworkError
    ├── ElementNotFoundError    element missing, detached or mislocated
    ├── WaitTimeoutError        a bounded wait expired
    ├── NavigationError         page navigation failed
    ├── ConfigurationError      invalid configuration (never retried)
    ├── RetryUsageError         retry executor called with a bad policy
    ├── RetryExhaustedError     every retry attempt failed
    └── RetryCancelledError     retry loop cancelled by the caller

Catch ``FrameworkError`` to handle every error the framework originates.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional


class FrameworkError(Exception):
    """Base class for all framework-specific errors."""
    pass


class ElementNotFoundError(FrameworkError):
    """Raised when a web element cannot be found or interacted with."""
    pass


class WaitTimeoutError(FrameworkError):
    """Raised when a wait operation exceeds its timeout."""
    pass


class NavigationError(FrameworkError):
    """Raised when navigating to a page fails."""
    pass


class ConfigurationError(FrameworkError):
    """Raised when configuration is missing or holds an invalid value."""
    pass


class RetryUsageError(FrameworkError, ValueError):
    """Raised before any attempt when the retry parameters are invalid."""
    pass


class RetryCancelledError(FrameworkError):
    """Raised when a cancellation token is triggered during a retry loop."""

    def __init__(self, operation_name: str, attempts_made: int):
        self.operation_name = operation_name
        self.attempts_made = attempts_made
        super().__init__(
            f"Operation cancelled after {attempts_made} attempt(s): {operation_name}"
        )


class RetryExhaustedError(FrameworkError):
    """
    Raised when every attempt of a retried operation has failed.

    Attributes:
        operation_name: Human-readable operation label
        attempts_made: Number of attempts executed (equals the retry limit)
        total_duration_ms: Wall-clock time across all attempts and backoff waits
        last_error: The error raised by the final attempt
    """

    def __init__(
        self,
        operation_name: str,
        attempts_made: int,
        total_duration_ms: int,
        last_error: Optional[BaseException],
    ):
        self.operation_name = operation_name
        self.attempts_made = attempts_made
        self.total_duration_ms = total_duration_ms
        self.last_error = last_error
        last_message = str(last_error) if last_error is not None else "Unknown error"
        super().__init__(
            f"Operation failed after {attempts_made} attempts "
            f"(total duration: {total_duration_ms} ms): {operation_name}. "
            f"Last error: {last_message}"
        )


# Errors a UI operation may reasonably recover from on a later attempt
RETRYABLE_ERRORS = (ElementNotFoundError, WaitTimeoutError, NavigationError)


__all__ = [
    "FrameworkError",
    "ElementNotFoundError",
    "WaitTimeoutError",
    "NavigationError",
    "ConfigurationError",
    "RetryUsageError",
    "RetryCancelledError",
    "RetryExhaustedError",
    "RETRYABLE_ERRORS",
]
