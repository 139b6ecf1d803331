# ================================================================================
# Element Actions Module
# ================================================================================
#
# This module provides UI element interaction utilities built on the retry
# executor. Each action is a timeout-bounded Playwright call whose driver
# errors are translated into framework exceptions before the executor decides
# whether to try again.
#
# Key Features:
#   - Bounded per-attempt waits (ui.timeout) with exponential backoff between attempts
#   - Element/timeout/navigation errors retried, fatal errors propagated at once
#   - Allure step per action and per attempt
#
# ================================================================================

from typing import Callable, Optional, TypeVar, Union
from urllib.parse import urlparse

import allure
from loguru import logger
from playwright.sync_api import Locator, Page

from shopauto_tools.common import get_config

from .driver_errors import driver_errors_translated
from .exceptions import ConfigurationError, RETRYABLE_ERRORS, RetryExhaustedError
from .retry_executor import RetryExecutor
from .retry_policy import BackoffPolicy


T = TypeVar("T")


def resolve_default_timeout() -> int:
    """Per-attempt timeout in milliseconds from ``ui.timeout`` (seconds)."""
    raw = get_config("ui.timeout", 10)
    try:
        seconds = float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid ui.timeout value {raw!r}. Must be a number") from e
    if seconds <= 0:
        raise ConfigurationError(f"Invalid ui.timeout value {raw!r}. Must be positive")
    return int(seconds * 1000)


class ElementActions:
    """
    A utility class providing retried element interaction methods.

    Example:
        actions = ElementActions(page)
        actions.navigate("/")
        actions.fill_input("#user-name", "standard_user", description="Username field")
        actions.click_element("#login-button", description="Login button")
    """

    def __init__(
        self,
        page: Page,
        default_timeout: Optional[int] = None,
        executor: Optional[RetryExecutor] = None,
        max_retries: Optional[int] = None,
    ):
        """
        Initialize ElementActions with a Playwright page.

        Args:
            page: Playwright Page object
            default_timeout: Per-attempt timeout in milliseconds (``ui.timeout`` when omitted)
            executor: Retry executor (configured policy limited to retryable errors when omitted)
            max_retries: Attempt limit per action (executor policy when omitted)
        """
        self.page = page
        self.default_timeout = resolve_default_timeout() if default_timeout is None else default_timeout
        self.executor = executor or RetryExecutor(
            policy=BackoffPolicy.from_config().with_overrides(retry_on=RETRYABLE_ERRORS)
        )
        self.max_retries = max_retries
        self.base_url = str(get_config("ui.base_url", "")).rstrip("/")

    @allure.step("Navigate to: {url}")
    def navigate(self, url: str = "", wait_until: str = "load") -> None:
        """
        Navigate to an absolute URL or a path relative to ``ui.base_url``.

        Args:
            url: Absolute URL, path relative to the base URL, or empty for the base URL
            wait_until: Playwright load state to wait for
        """
        url = self._resolve_url(url)

        def operation() -> None:
            with driver_errors_translated(url):
                self.page.goto(url, wait_until=wait_until, timeout=self.default_timeout)

        logger.info(f"Navigating to: {url}")
        self._run(operation, f"Navigate to {url}")

    @allure.step("Click element: {description}")
    def click_element(
        self,
        selector: Union[str, Locator],
        description: str = "",
        timeout: int = None,
        force: bool = False,
        double_click: bool = False
    ) -> None:
        """
        Click on an element with retry logic.

        Args:
            selector: CSS selector or Locator object
            description: Human-readable description for reporting
            timeout: Per-attempt timeout in milliseconds
            force: Force click even if element is not actionable
            double_click: Perform double-click instead of single click
        """
        timeout = self.default_timeout if timeout is None else timeout
        locator = self._get_locator(selector)
        target = description or str(selector)

        def operation() -> None:
            with driver_errors_translated(target):
                locator.wait_for(state="visible", timeout=timeout)
                if double_click:
                    locator.dblclick(timeout=timeout, force=force)
                else:
                    locator.click(timeout=timeout, force=force)

        logger.info(f"Clicking element: {target}")
        self._run(operation, f"Click element: {target}")

    @allure.step("Fill input: {description}")
    def fill_input(
        self,
        selector: Union[str, Locator],
        value: str,
        description: str = "",
        clear_first: bool = True,
        timeout: int = None
    ) -> None:
        """
        Fill an input field with text.

        Args:
            selector: CSS selector or Locator object
            value: Text to enter
            description: Human-readable description for reporting
            clear_first: Clear existing content before filling
            timeout: Per-attempt timeout in milliseconds
        """
        timeout = self.default_timeout if timeout is None else timeout
        locator = self._get_locator(selector)
        target = description or str(selector)

        def operation() -> None:
            with driver_errors_translated(target):
                locator.wait_for(state="visible", timeout=timeout)
                if clear_first:
                    locator.clear(timeout=timeout)
                locator.fill(value, timeout=timeout)

        shown = "*" * len(value) if "password" in target.lower() else value[:50]
        logger.info(f"Filling input: {target} with '{shown}'")
        self._run(operation, f"Fill input: {target}")

    @allure.step("Get text: {description}")
    def get_text(
        self,
        selector: Union[str, Locator],
        description: str = "",
        timeout: int = None
    ) -> str:
        """
        Get text content of an element.

        Returns:
            Text content of the element ("" when the element has none)
        """
        timeout = self.default_timeout if timeout is None else timeout
        locator = self._get_locator(selector)
        target = description or str(selector)

        def operation() -> str:
            with driver_errors_translated(target):
                locator.wait_for(state="visible", timeout=timeout)
                return locator.text_content(timeout=timeout) or ""

        text = self._run(operation, f"Get text: {target}")
        logger.debug(f"Got text from {target}: '{text}'")
        return text

    @allure.step("Wait for element: {description}")
    def wait_for_element(
        self,
        selector: Union[str, Locator],
        description: str = "",
        state: str = "visible",
        timeout: int = None
    ) -> Locator:
        """
        Wait for an element to reach a specific state.

        Args:
            selector: CSS selector or Locator object
            description: Human-readable description for reporting
            state: Expected state - "visible", "hidden", "attached", "detached"
            timeout: Per-attempt timeout in milliseconds

        Returns:
            The Locator object
        """
        timeout = self.default_timeout if timeout is None else timeout
        locator = self._get_locator(selector)
        target = description or str(selector)

        def operation() -> Locator:
            with driver_errors_translated(target):
                locator.wait_for(state=state, timeout=timeout)
            return locator

        logger.info(f"Waiting for {target} to be {state}")
        return self._run(operation, f"Element to be {state}: {target}")

    @allure.step("Check element visible: {description}")
    def is_visible(
        self,
        selector: Union[str, Locator],
        description: str = "",
        timeout: int = 5000
    ) -> bool:
        """
        Check if an element becomes visible within one bounded wait.

        Returns:
            True if visible, False otherwise
        """
        target = description or str(selector)
        try:
            self.executor.execute(
                lambda: self._wait_visible(selector, target, timeout),
                f"Check visible: {target}",
                max_retries=1,
            )
            return True
        except RetryExhaustedError as e:
            logger.debug(f"Element not visible: {target} ({e.last_error})")
            return False

    def _wait_visible(self, selector: Union[str, Locator], target: str, timeout: int) -> None:
        with driver_errors_translated(target):
            self._get_locator(selector).wait_for(state="visible", timeout=timeout)

    def _run(self, operation: Callable[[], T], operation_name: str) -> T:
        return self.executor.execute(operation, operation_name, self.max_retries)

    def _resolve_url(self, url: str) -> str:
        """Join paths without a scheme onto ``base_url``; absolute URLs pass through."""
        if urlparse(url).scheme:
            return url
        if not url or url.startswith("/"):
            return f"{self.base_url}{url}"
        return f"{self.base_url}/{url}"

    def _get_locator(self, selector: Union[str, Locator]) -> Locator:
        """Convert selector to Locator if needed."""
        if isinstance(selector, Locator):
            return selector
        return self.page.locator(selector)


__all__ = [
    "ElementActions",
    "resolve_default_timeout",
]
