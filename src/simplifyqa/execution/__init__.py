"""Execution client, records, retry policy and run watcher."""

from simplifyqa.execution.client import ExecutionClient
from simplifyqa.execution.models import ExecutionRecord, StopResult
from simplifyqa.execution.retry import DeadlineRetry, RetryWindow

__all__ = [
    "ExecutionClient",
    "ExecutionRecord",
    "StopResult",
    "DeadlineRetry",
    "RetryWindow",
]
