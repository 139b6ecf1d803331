"""
================================================================================
Retry Executor
================================================================================

Runs a fallible, zero-argument operation up to N times with exponential
backoff between attempts.

Behavior:
    - Attempts are strictly sequential; attempt k+1 starts only after attempt
      k and its backoff wait have completed
    - The first attempt that returns ends the call immediately (no wait)
    - Backoff is applied only between attempts, never after the last one
    - After N failures a single RetryExhaustedError is raised, carrying the
      operation name, attempt count, total duration and the final error
    - Earlier attempt errors are logged, not retained

The executor does not classify errors. Callers translate driver errors into
retryable or fatal ones inside the operation itself (see driver_errors), and
may narrow ``BackoffPolicy.retry_on`` so fatal errors escape unretried.

Usage:
    executor = RetryExecutor()
    button = executor.execute(
        lambda: page.locator("#login-button").element_handle(timeout=5000),
        "Finding login button",
    )

    outcome = executor.run(flaky_call, "Load inventory")   # never raises
    if not outcome.succeeded:
        ...

    async_executor = AsyncRetryExecutor()
    title = await async_executor.execute(lambda: page.title(), "Read title")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import inspect
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from functools import wraps
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    TypeVar,
)

import allure
from loguru import logger

from .exceptions import RetryCancelledError, RetryExhaustedError
from .retry_diagnostics import (
    AttemptRecord,
    RetrySummary,
    default_sinks,
    emit_attempt,
    emit_summary,
)
from .retry_policy import BackoffPolicy, validate_max_retries


T = TypeVar("T")


class CancellationToken:
    """
    Thread-safe cooperative cancellation flag.

    Checked at the top of every attempt and observed during backoff waits,
    which end early once the token is cancelled.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)


@dataclass
class RetryOutcome(Generic[T]):
    """
    Terminal value of a retried call.

    Either a success carrying ``result`` or a failure carrying ``last_error``.
    ``unwrap()`` converts a failure into RetryExhaustedError.
    """
    operation_name: str
    succeeded: bool
    attempts_made: int
    total_duration_ms: int
    result: Optional[T] = None
    last_error: Optional[BaseException] = None

    def unwrap(self) -> T:
        if self.succeeded:
            return self.result
        raise RetryExhaustedError(
            operation_name=self.operation_name,
            attempts_made=self.attempts_made,
            total_duration_ms=self.total_duration_ms,
            last_error=self.last_error,
        ) from self.last_error


class _RetryExecutorBase:
    """State and bookkeeping shared by the sync and async executors."""

    def __init__(
        self,
        policy: Optional[BackoffPolicy] = None,
        sinks: Optional[Iterable[Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            policy: Backoff policy; read from configuration when omitted
            sinks: Diagnostic sinks; loguru (plus Allure if enabled) when omitted
            clock: Monotonic clock in seconds, injectable for tests
        """
        self.policy = policy or BackoffPolicy.from_config()
        self.sinks: List[Any] = list(sinks) if sinks is not None else default_sinks()
        self._clock = clock

    def _resolve_max_retries(self, max_retries: Optional[int]) -> int:
        if max_retries is None:
            return self.policy.max_retries
        return validate_max_retries(max_retries)

    def _elapsed_ms(self, since: float) -> int:
        return int(round((self._clock() - since) * 1000))

    def _check_cancelled(
        self,
        cancel_token: Optional[CancellationToken],
        operation_name: str,
        attempts_made: int,
        call_started: float,
        last_error: Optional[BaseException],
    ) -> None:
        if cancel_token is not None and cancel_token.cancelled:
            self._cancelled(operation_name, attempts_made, call_started, last_error)

    def _cancelled(
        self,
        operation_name: str,
        attempts_made: int,
        call_started: float,
        last_error: Optional[BaseException],
    ) -> None:
        logger.warning(f"Retry loop cancelled: {operation_name} ({attempts_made} attempt(s) made)")
        self._emit_failure_summary(operation_name, attempts_made, call_started, last_error)
        raise RetryCancelledError(operation_name, attempts_made) from last_error

    def _record_attempt(
        self,
        operation_name: str,
        attempt: int,
        max_retries: int,
        started_at: datetime,
        attempt_started: float,
        error: Optional[BaseException] = None,
    ) -> None:
        emit_attempt(
            self.sinks,
            AttemptRecord(
                operation_name=operation_name,
                attempt_index=attempt,
                max_retries=max_retries,
                started_at=started_at,
                duration_ms=self._elapsed_ms(attempt_started),
                succeeded=error is None,
                error_class=type(error).__name__ if error is not None else None,
                error_message=str(error) if error is not None else None,
            ),
        )

    def _emit_failure_summary(
        self,
        operation_name: str,
        attempts_made: int,
        call_started: float,
        last_error: Optional[BaseException],
    ) -> int:
        total_ms = self._elapsed_ms(call_started)
        emit_summary(
            self.sinks,
            RetrySummary(
                operation_name=operation_name,
                succeeded=False,
                attempts_made=attempts_made,
                total_duration_ms=total_ms,
                last_error_message=str(last_error) if last_error is not None else None,
            ),
        )
        return total_ms

    def _succeeded(
        self,
        operation_name: str,
        attempt: int,
        call_started: float,
        result: Any,
    ) -> RetryOutcome:
        total_ms = self._elapsed_ms(call_started)
        emit_summary(
            self.sinks,
            RetrySummary(
                operation_name=operation_name,
                succeeded=True,
                attempts_made=attempt,
                total_duration_ms=total_ms,
            ),
        )
        return RetryOutcome(
            operation_name=operation_name,
            succeeded=True,
            attempts_made=attempt,
            total_duration_ms=total_ms,
            result=result,
        )

    def _exhausted(
        self,
        operation_name: str,
        max_retries: int,
        call_started: float,
        last_error: Optional[BaseException],
    ) -> RetryOutcome:
        total_ms = self._emit_failure_summary(operation_name, max_retries, call_started, last_error)
        return RetryOutcome(
            operation_name=operation_name,
            succeeded=False,
            attempts_made=max_retries,
            total_duration_ms=total_ms,
            last_error=last_error,
        )

    def _not_retryable(
        self,
        operation_name: str,
        attempt: int,
        call_started: float,
        error: BaseException,
    ) -> None:
        logger.error(
            f"Non-retryable {type(error).__name__} on attempt {attempt}: {operation_name}. "
            f"Propagating without further attempts"
        )
        self._emit_failure_summary(operation_name, attempt, call_started, error)

    def _log_backoff(self, operation_name: str, attempt: int, max_retries: int, delay: float) -> None:
        logger.info(
            f"Waiting {delay:g}s before attempt {attempt + 1}/{max_retries}: {operation_name}"
        )


class RetryExecutor(_RetryExecutorBase):
    """
    Synchronous retry executor.

    The backoff wait blocks only the calling thread, so independent calls from
    parallel workers never delay each other. The executor keeps no per-call
    state and can be shared between threads.
    """

    def __init__(
        self,
        policy: Optional[BackoffPolicy] = None,
        sinks: Optional[Iterable[Any]] = None,
        sleep: Callable[[float], Any] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(policy=policy, sinks=sinks, clock=clock)
        self._sleep = sleep

    def run(
        self,
        operation: Callable[[], T],
        operation_name: str,
        max_retries: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RetryOutcome[T]:
        """
        Run ``operation`` with retries and return a tagged outcome.

        Args:
            operation: Zero-argument callable; may be invoked several times
            operation_name: Label used for diagnostics only
            max_retries: Attempt limit; the policy's value when omitted
            cancel_token: Optional cooperative cancellation token

        Returns:
            RetryOutcome holding the result or the last error

        Raises:
            RetryUsageError: If max_retries < 1 (no attempt is made)
            RetryCancelledError: If the token is cancelled
            Exception: Any error outside ``policy.retry_on``, unchanged
        """
        max_retries = self._resolve_max_retries(max_retries)
        call_started = self._clock()
        last_error: Optional[BaseException] = None

        logger.debug(f"Starting retry operation: {operation_name} (max retries: {max_retries})")

        for attempt in range(1, max_retries + 1):
            self._check_cancelled(cancel_token, operation_name, attempt - 1, call_started, last_error)

            started_at = datetime.now()
            attempt_started = self._clock()
            try:
                with allure.step(f"Attempt {attempt}/{max_retries}: {operation_name}"):
                    result = operation()
            except Exception as e:
                self._record_attempt(operation_name, attempt, max_retries, started_at, attempt_started, e)
                if not self.policy.is_retryable(e):
                    self._not_retryable(operation_name, attempt, call_started, e)
                    raise
                last_error = e
                if attempt < max_retries:
                    delay = self.policy.delay_for(attempt)
                    self._log_backoff(operation_name, attempt, max_retries, delay)
                    self._pause(delay, cancel_token, operation_name, attempt, call_started, last_error)
                continue

            self._record_attempt(operation_name, attempt, max_retries, started_at, attempt_started)
            return self._succeeded(operation_name, attempt, call_started, result)

        return self._exhausted(operation_name, max_retries, call_started, last_error)

    def execute(
        self,
        operation: Callable[[], T],
        operation_name: str,
        max_retries: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> T:
        """
        Run ``operation`` with retries and return its result.

        Raises:
            RetryExhaustedError: If every attempt failed
            RetryUsageError: If max_retries < 1 (no attempt is made)
        """
        return self.run(operation, operation_name, max_retries, cancel_token).unwrap()

    def _pause(
        self,
        delay: float,
        cancel_token: Optional[CancellationToken],
        operation_name: str,
        attempt: int,
        call_started: float,
        last_error: Optional[BaseException],
    ) -> None:
        if cancel_token is None:
            self._sleep(delay)
        elif cancel_token.wait(delay):
            self._cancelled(operation_name, attempt, call_started, last_error)
        logger.debug(f"Retry resuming after {delay:g}s wait: {operation_name}")


class AsyncRetryExecutor(_RetryExecutorBase):
    """
    Retry executor for coroutine-based operations.

    The backoff wait is an ``await`` on the injected sleep (``asyncio.sleep``
    by default), so only the calling task is suspended. Task cancellation
    (asyncio.CancelledError) is never intercepted.

    Allure steps use a thread-local stack, so no step stays open across an
    ``await``. Each attempt is reported as a closed step once it has ended.
    """

    def __init__(
        self,
        policy: Optional[BackoffPolicy] = None,
        sinks: Optional[Iterable[Any]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(policy=policy, sinks=sinks, clock=clock)
        self._sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str,
        max_retries: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RetryOutcome[T]:
        """Async counterpart of RetryExecutor.run; ``operation`` returns an awaitable."""
        max_retries = self._resolve_max_retries(max_retries)
        call_started = self._clock()
        last_error: Optional[BaseException] = None

        logger.debug(f"Starting async retry operation: {operation_name} (max retries: {max_retries})")

        for attempt in range(1, max_retries + 1):
            self._check_cancelled(cancel_token, operation_name, attempt - 1, call_started, last_error)

            started_at = datetime.now()
            attempt_started = self._clock()
            try:
                result = await operation()
            except Exception as e:
                self._record_attempt(operation_name, attempt, max_retries, started_at, attempt_started, e)
                self._attempt_step(operation_name, attempt, max_retries, e)
                if not self.policy.is_retryable(e):
                    self._not_retryable(operation_name, attempt, call_started, e)
                    raise
                last_error = e
                if attempt < max_retries:
                    delay = self.policy.delay_for(attempt)
                    self._log_backoff(operation_name, attempt, max_retries, delay)
                    await self._sleep(delay)
                    self._check_cancelled(cancel_token, operation_name, attempt, call_started, last_error)
                continue

            self._record_attempt(operation_name, attempt, max_retries, started_at, attempt_started)
            self._attempt_step(operation_name, attempt, max_retries)
            return self._succeeded(operation_name, attempt, call_started, result)

        return self._exhausted(operation_name, max_retries, call_started, last_error)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str,
        max_retries: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> T:
        """Async counterpart of RetryExecutor.execute."""
        outcome = await self.run(operation, operation_name, max_retries, cancel_token)
        return outcome.unwrap()

    @staticmethod
    def _attempt_step(
        operation_name: str,
        attempt: int,
        max_retries: int,
        error: Optional[BaseException] = None,
    ) -> None:
        result = "passed" if error is None else f"failed: {type(error).__name__}"
        with allure.step(f"Attempt {attempt}/{max_retries}: {operation_name} ({result})"):
            pass


def retry_operation(
    operation: Callable[[], T],
    operation_name: str,
    max_retries: int = 3,
) -> T:
    """
    Retry an operation with the configured backoff policy.

    Example:
        button = retry_operation(
            lambda: page.locator("#login-button").element_handle(timeout=5000),
            "Finding login button",
        )
    """
    return RetryExecutor().execute(operation, operation_name, max_retries)


def with_retry(
    policy: Optional[BackoffPolicy] = None,
    operation_name: Optional[str] = None,
):
    """
    Decorator for adding retry logic to plain or ``async def`` functions.

    Args:
        policy: Backoff policy; read from configuration when omitted
        operation_name: Diagnostic label; defaults to the function's qualified name
    """

    def decorator(func: Callable):
        name = operation_name or func.__qualname__

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                executor = AsyncRetryExecutor(policy=policy)
                return await executor.execute(lambda: func(*args, **kwargs), name)

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            return RetryExecutor(policy=policy).execute(lambda: func(*args, **kwargs), name)

        return wrapper

    return decorator


__all__ = [
    "AttemptRecord",
    "AsyncRetryExecutor",
    "CancellationToken",
    "RetryExecutor",
    "RetryOutcome",
    "RetrySummary",
    "retry_operation",
    "with_retry",
]
