"""
================================================================================
Driver Error Translation
================================================================================

Maps Playwright exceptions onto the framework's exception taxonomy.

Translation happens inside the operation callable, before the retry executor
sees the error, so the caller decides what is retryable:

    Playwright TimeoutError                  -> WaitTimeoutError      (retryable)
    net::ERR_* / NS_ERROR_* / navigation     -> NavigationError       (retryable)
    page, context or browser closed          -> FrameworkError        (fatal)
    anything else (detached, strict mode...) -> ElementNotFoundError  (retryable)

Usage:
    def operation():
        with driver_errors_translated("Login button"):
            page.locator("#login-button").click(timeout=5000)

    executor.execute(operation, "Click login button")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import (
    ElementNotFoundError,
    FrameworkError,
    NavigationError,
    WaitTimeoutError,
)


_NAVIGATION_PATTERN = re.compile(
    r"net::ERR_|NS_ERROR_|navigation|navigating|page\.goto",
    re.IGNORECASE,
)
_CLOSED_PATTERN = re.compile(
    r"has been closed|target closed",
    re.IGNORECASE,
)


def _first_line(error: BaseException) -> str:
    # Playwright messages carry a multi-line call log after the summary line
    message = getattr(error, "message", None) or str(error)
    return message.strip().splitlines()[0] if message.strip() else type(error).__name__


def translate_driver_error(error: PlaywrightError, target: str) -> FrameworkError:
    """
    Classify a Playwright error.

    Args:
        error: Error raised by the Playwright driver
        target: Human-readable description of the element or URL involved

    Returns:
        The framework exception to raise in its place
    """
    summary = _first_line(error)

    if isinstance(error, PlaywrightTimeoutError):
        return WaitTimeoutError(f"Timed out waiting for {target}: {summary}")
    if _CLOSED_PATTERN.search(summary):
        return FrameworkError(f"Browser session closed while handling {target}: {summary}")
    if _NAVIGATION_PATTERN.search(summary):
        return NavigationError(f"Navigation failed for {target}: {summary}")
    return ElementNotFoundError(f"Element not available: {target}: {summary}")


@contextmanager
def driver_errors_translated(target: str) -> Iterator[None]:
    """Re-raise Playwright errors from the block as framework errors."""
    try:
        yield
    except PlaywrightError as e:
        raise translate_driver_error(e, target) from e


__all__ = [
    "translate_driver_error",
    "driver_errors_translated",
]
