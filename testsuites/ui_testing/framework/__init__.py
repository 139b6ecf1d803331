"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework for the sample e-commerce site.

Components:
    - retry_executor: Retry-with-exponential-backoff execution wrapper
    - retry_policy: Immutable backoff configuration
    - retry_diagnostics: Per-attempt and summary diagnostic records and sinks
    - driver_errors: Playwright error translation into framework exceptions
    - element_actions: Retried, timeout-bounded element interactions
    - exceptions: Framework exception taxonomy

Author: Automation Team
License: MIT
================================================================================
"""

from .exceptions import (
    ConfigurationError,
    ElementNotFoundError,
    FrameworkError,
    NavigationError,
    RETRYABLE_ERRORS,
    RetryCancelledError,
    RetryExhaustedError,
    RetryUsageError,
    WaitTimeoutError,
)
from .retry_policy import BackoffPolicy, DEFAULT_POLICY
from .retry_executor import (
    AsyncRetryExecutor,
    CancellationToken,
    RetryExecutor,
    RetryOutcome,
    retry_operation,
    with_retry,
)
from .element_actions import ElementActions

__all__ = [
    "AsyncRetryExecutor",
    "BackoffPolicy",
    "CancellationToken",
    "ConfigurationError",
    "DEFAULT_POLICY",
    "ElementActions",
    "ElementNotFoundError",
    "FrameworkError",
    "NavigationError",
    "RETRYABLE_ERRORS",
    "RetryCancelledError",
    "RetryExecutor",
    "RetryExhaustedError",
    "RetryOutcome",
    "RetryUsageError",
    "WaitTimeoutError",
    "retry_operation",
    "with_retry",
]
