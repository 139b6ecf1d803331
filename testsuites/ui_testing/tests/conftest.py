"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for exercising the UI framework layer without launching a browser.

Key Features:
- Fake Playwright page/locator doubles with scripted driver failures
- ElementActions wired to a retry executor that records backoff waits
- Configuration reset around every test

================================================================================
"""

from typing import Dict, List

import pytest

from shopauto_tools.common import reset_config
from testsuites.ui_testing.framework.element_actions import ElementActions
from testsuites.ui_testing.framework.exceptions import RETRYABLE_ERRORS
from testsuites.ui_testing.framework.retry_executor import RetryExecutor
from testsuites.ui_testing.framework.retry_policy import BackoffPolicy


# ================================================================================
# Playwright Doubles
# ================================================================================

class FakeLocator:
    """Locator double; ``wait_for`` raises the queued failures in order."""

    def __init__(self, selector: str, text: str = ""):
        self.selector = selector
        self.text = text
        self.failures: List[Exception] = []
        self.calls: List[str] = []
        self.value = None
        self.timeouts: List[int] = []

    def wait_for(self, state: str = "visible", timeout: int = None) -> None:
        self.calls.append(f"wait_for:{state}")
        self.timeouts.append(timeout)
        if self.failures:
            raise self.failures.pop(0)

    def click(self, timeout: int = None, force: bool = False) -> None:
        self.calls.append("click")

    def dblclick(self, timeout: int = None, force: bool = False) -> None:
        self.calls.append("dblclick")

    def clear(self, timeout: int = None) -> None:
        self.calls.append("clear")
        self.value = ""

    def fill(self, value: str, timeout: int = None) -> None:
        self.calls.append("fill")
        self.value = value

    def text_content(self, timeout: int = None):
        self.calls.append("text_content")
        return self.text


class FakePage:
    """Page double handing out one FakeLocator per selector."""

    def __init__(self):
        self.locators: Dict[str, FakeLocator] = {}
        self.visited: List[str] = []
        self.goto_failures: List[Exception] = []
        self.goto_timeouts: List[int] = []

    def locator(self, selector: str) -> FakeLocator:
        return self.locators.setdefault(selector, FakeLocator(selector))

    def goto(self, url: str, wait_until: str = "load", timeout: int = None) -> None:
        self.visited.append(url)
        self.goto_timeouts.append(timeout)
        if self.goto_failures:
            raise self.goto_failures.pop(0)


# ================================================================================
# Fixtures
# ================================================================================

@pytest.fixture(autouse=True)
def _ui_config(monkeypatch):
    """Pin the site URL and per-attempt timeout for every UI test."""
    monkeypatch.setenv("UI_BASE_URL", "https://www.saucedemo.com")
    monkeypatch.setenv("UI_TIMEOUT", "10")
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def backoff_waits() -> List[float]:
    return []


@pytest.fixture
def actions(fake_page: FakePage, backoff_waits: List[float]) -> ElementActions:
    executor = RetryExecutor(
        policy=BackoffPolicy(retry_on=RETRYABLE_ERRORS),
        sinks=[],
        sleep=backoff_waits.append,
    )
    return ElementActions(fake_page, default_timeout=5000, executor=executor)
