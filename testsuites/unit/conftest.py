"""
================================================================================
Unit Test Configuration
================================================================================

Shared fixtures for framework unit tests:
    - fake_clock: deterministic clock + sleep that records backoff waits
    - recorder: diagnostic sink capturing attempt and summary records
    - executor / async_executor: executors wired to both of the above
    - log_messages: loguru output captured as plain strings

================================================================================
"""

from typing import Any, List

import pytest
from loguru import logger

from shopauto_tools.common import reset_config
from testsuites.ui_testing.framework.retry_executor import AsyncRetryExecutor, RetryExecutor
from testsuites.ui_testing.framework.retry_policy import BackoffPolicy


class FakeClock:
    """Monotonic clock that only moves when slept on or advanced."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    async def async_sleep(self, seconds: float) -> None:
        self.sleep(seconds)


class RecordingSink:
    """Diagnostic sink that keeps every record it receives."""

    def __init__(self):
        self.attempts: List[Any] = []
        self.summaries: List[Any] = []

    def record_attempt(self, record) -> None:
        self.attempts.append(record)

    def record_summary(self, summary) -> None:
        self.summaries.append(summary)


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test starts from freshly loaded configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def executor(fake_clock, recorder) -> RetryExecutor:
    return RetryExecutor(
        policy=BackoffPolicy(),
        sinks=[recorder],
        sleep=fake_clock.sleep,
        clock=fake_clock,
    )


@pytest.fixture
def async_executor(fake_clock, recorder) -> AsyncRetryExecutor:
    return AsyncRetryExecutor(
        policy=BackoffPolicy(),
        sinks=[recorder],
        sleep=fake_clock.async_sleep,
        clock=fake_clock,
    )


@pytest.fixture
def log_messages():
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m), format="{level} | {message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)


class FlakyOperation:
    """Callable failing with the queued errors before returning ``result``."""

    def __init__(self, errors, result=None, clock: FakeClock = None, cost: float = 0.0):
        self.errors = list(errors)
        self.result = result
        self.calls = 0
        self.clock = clock
        self.cost = cost

    def __call__(self):
        self.calls += 1
        if self.clock is not None:
            self.clock.advance(self.cost)
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.fixture
def flaky():
    """Factory for FlakyOperation instances."""
    return FlakyOperation
