# ================================================================================
# Retry Policy Module
# ================================================================================
#
# Immutable backoff configuration shared by the retry executors.
#
# Backoff Strategy (defaults):
#   - Attempt 1 fails -> wait 1s
#   - Attempt 2 fails -> wait 2s
#   - Attempt 3 fails -> wait 4s
#   - Attempt 4+ fails -> wait 8s (capped)
#
# The delay is derived from the number of the attempt that just failed,
# never from a running total. No wait follows the final attempt.
#
# Usage:
#   policy = BackoffPolicy(max_retries=5)
#   policy.delays()          # [1.0, 2.0, 4.0, 8.0]
#   policy = BackoffPolicy.from_config()
#
# ================================================================================

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple, Type

from shopauto_tools.common import get_config

from .exceptions import ConfigurationError, RetryUsageError


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Configuration for retry behavior.

    Attributes:
        max_retries: Total number of attempts (first attempt included)
        initial_delay: Wait in seconds after the first failed attempt
        multiplier: Growth factor applied per failed attempt
        max_delay: Upper bound for any single wait, in seconds
        retry_on: Exception types treated as retryable; anything else
            propagates immediately without further attempts
    """
    max_retries: int = 3
    initial_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 8.0
    retry_on: Tuple[Type[BaseException], ...] = field(default=(Exception,))

    def __post_init__(self) -> None:
        validate_max_retries(self.max_retries)
        if self.initial_delay < 0 or self.max_delay < 0:
            raise RetryUsageError(
                f"Backoff delays must be non-negative "
                f"(initial_delay={self.initial_delay}, max_delay={self.max_delay})"
            )
        if self.multiplier < 1:
            raise RetryUsageError(f"Backoff multiplier must be >= 1, got {self.multiplier}")
        if not self.retry_on:
            raise RetryUsageError("retry_on must name at least one exception type")
        for exc_type in self.retry_on:
            if not (isinstance(exc_type, type) and issubclass(exc_type, BaseException)):
                raise RetryUsageError(f"retry_on entries must be exception types, got {exc_type!r}")

    def delay_for(self, attempt: int) -> float:
        """
        Calculate the wait after a failed attempt.

        Args:
            attempt: 1-based number of the attempt that just failed

        Returns:
            Seconds to wait before the next attempt
        """
        if attempt < 1:
            raise RetryUsageError(f"Attempt numbers start at 1, got {attempt}")
        return min(self.max_delay, self.initial_delay * self.multiplier ** (attempt - 1))

    def delays(self, attempts: Optional[int] = None) -> List[float]:
        """Waits inserted between ``attempts`` consecutive failed attempts."""
        attempts = self.max_retries if attempts is None else attempts
        return [self.delay_for(attempt) for attempt in range(1, attempts)]

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on)

    def with_overrides(self, **changes: Any) -> "BackoffPolicy":
        """Return a validated copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_config(cls) -> "BackoffPolicy":
        """
        Build a policy from the ``retry.*`` configuration keys.

        Raises:
            ConfigurationError: If a configured value is not numeric or
                ``retry.max_retries`` is not a whole number
        """
        max_retries = _config_attempt_count(get_config("retry.max_retries", 3))
        try:
            return cls(
                max_retries=max_retries,
                initial_delay=float(get_config("retry.initial_delay", 1.0)),
                multiplier=float(get_config("retry.multiplier", 2.0)),
                max_delay=float(get_config("retry.max_delay", 8.0)),
            )
        except RetryUsageError as e:
            raise ConfigurationError(f"Invalid retry configuration: {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Retry configuration values must be numeric: {e}"
            ) from e


def validate_max_retries(max_retries: Any) -> int:
    """Reject anything that is not a positive integer attempt count."""
    if isinstance(max_retries, bool) or not isinstance(max_retries, int):
        raise RetryUsageError(f"max_retries must be an integer, got {max_retries!r}")
    if max_retries < 1:
        raise RetryUsageError(f"max_retries must be >= 1, got {max_retries}")
    return max_retries


def _config_attempt_count(raw: Any) -> int:
    # YAML yields an int, environment variables a string of digits
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    raise ConfigurationError(
        f"Invalid retry configuration: retry.max_retries must be a whole number, got {raw!r}"
    )


DEFAULT_POLICY = BackoffPolicy()


__all__ = [
    "BackoffPolicy",
    "DEFAULT_POLICY",
    "validate_max_retries",
]
