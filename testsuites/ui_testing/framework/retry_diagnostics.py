"""
================================================================================
Retry Diagnostics
================================================================================

Observability records emitted by the retry executors and the sinks that
consume them.

Records:
    - AttemptRecord: one per attempt (index, outcome, duration, error)
    - RetrySummary: one per call (succeeded, attempts made, total duration)

Sinks:
    Any object exposing ``record_attempt(record)`` and ``record_summary(summary)``.
    - LoguruDiagnostics: human-readable log lines with structured ``extra`` fields
    - AllureDiagnostics: JSON attachment of failed call summaries

Sinks are observational only. An exception raised inside a sink is logged
and discarded; it never changes the outcome of the retried operation.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from shopauto_tools.common import as_bool, get_config
from shopauto_tools.report_tools.allure_utils import attach_json


@dataclass
class AttemptRecord:
    """
    Diagnostic record for a single attempt.

    Attributes:
        operation_name: Label of the retried operation
        attempt_index: 1-based attempt number
        max_retries: Attempt limit for the call
        started_at: Wall-clock start of the attempt
        duration_ms: Time spent inside the operation
        succeeded: Whether the attempt returned normally
        error_class: Exception class name for failed attempts
        error_message: Exception message for failed attempts
    """
    operation_name: str
    attempt_index: int
    max_retries: int
    started_at: datetime
    duration_ms: int
    succeeded: bool
    error_class: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def outcome(self) -> str:
        return "success" if self.succeeded else "failure"

    @property
    def is_final(self) -> bool:
        return self.attempt_index >= self.max_retries

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["outcome"] = self.outcome
        return data


@dataclass
class RetrySummary:
    """Terminal record describing how a retried call ended."""
    operation_name: str
    succeeded: bool
    attempts_made: int
    total_duration_ms: int
    last_error_message: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class LoguruDiagnostics:
    """
    Log sink for retry diagnostics.

    Log Output:
        ATTEMPT 1/3 FAILED: Click login button | ElementNotFoundError: ... (12 ms)
        Waiting 1s before attempt 2/3: Click login button
        ATTEMPT 2/3 SUCCEEDED: Click login button (8 ms)
        OPERATION SUCCEEDED: Click login button on attempt 2 (1024 ms total)
    """

    def record_attempt(self, record: AttemptRecord) -> None:
        bound = logger.bind(retry_record="attempt", **record.as_dict())
        if record.succeeded:
            bound.info(
                f"ATTEMPT {record.attempt_index}/{record.max_retries} SUCCEEDED: "
                f"{record.operation_name} ({record.duration_ms} ms)"
            )
            return

        log = bound.error if record.is_final else bound.warning
        log(
            f"ATTEMPT {record.attempt_index}/{record.max_retries} FAILED: "
            f"{record.operation_name} | {record.error_class}: {record.error_message} "
            f"({record.duration_ms} ms)"
        )

    def record_summary(self, summary: RetrySummary) -> None:
        bound = logger.bind(retry_record="summary", **summary.as_dict())
        if summary.succeeded:
            bound.info(
                f"OPERATION SUCCEEDED: {summary.operation_name} on attempt "
                f"{summary.attempts_made} ({summary.total_duration_ms} ms total)"
            )
        else:
            bound.error(
                f"OPERATION FAILED: {summary.operation_name} after "
                f"{summary.attempts_made} attempt(s) ({summary.total_duration_ms} ms total). "
                f"Last error: {summary.last_error_message}"
            )


class AllureDiagnostics:
    """Attach failed retry summaries to the running Allure test."""

    def record_attempt(self, record: AttemptRecord) -> None:
        pass

    def record_summary(self, summary: RetrySummary) -> None:
        if summary.succeeded:
            return
        attach_json(summary.as_dict(), name=f"Retry exhausted: {summary.operation_name}")


def default_sinks() -> List[Any]:
    """Sinks used when an executor is built without explicit ones."""
    sinks: List[Any] = [LoguruDiagnostics()]
    if as_bool(get_config("retry.allure_attachments", True)):
        sinks.append(AllureDiagnostics())
    return sinks


def emit_attempt(sinks: Iterable[Any], record: AttemptRecord) -> None:
    for sink in sinks:
        try:
            sink.record_attempt(record)
        except Exception as e:
            logger.opt(exception=e).debug(f"Diagnostic sink {type(sink).__name__} failed: {e}")


def emit_summary(sinks: Iterable[Any], summary: RetrySummary) -> None:
    for sink in sinks:
        try:
            sink.record_summary(summary)
        except Exception as e:
            logger.opt(exception=e).debug(f"Diagnostic sink {type(sink).__name__} failed: {e}")


__all__ = [
    "AttemptRecord",
    "RetrySummary",
    "LoguruDiagnostics",
    "AllureDiagnostics",
    "default_sinks",
    "emit_attempt",
    "emit_summary",
]
