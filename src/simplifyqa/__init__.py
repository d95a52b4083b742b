"""
SimplifyQA pipeline-execution client.

Start remote pipeline executions, poll their status with a time-bounded retry,
and stop them.

Usage:
    from simplifyqa import ClientSettings, run_pipeline

    client = ClientSettings().build_client()
    result = client.start("1042")
"""

from simplifyqa.core.errors import (
    ConfigError,
    ErrorCategory,
    ExecutionClientError,
    HttpStatusError,
    MissingConfigError,
    NetworkError,
    ParseError,
    PipelineTimeoutError,
    RetryBudgetExceededError,
)
from simplifyqa.core.result import Err, Ok, Result
from simplifyqa.core.settings import ClientSettings, ProxyConfig
from simplifyqa.execution.client import ExecutionClient
from simplifyqa.execution.models import ExecutionRecord, StopResult
from simplifyqa.execution.retry import DeadlineRetry
from simplifyqa.execution.watch import is_success, run_pipeline

__version__ = "0.1.0"

__all__ = [
    "ClientSettings",
    "ConfigError",
    "DeadlineRetry",
    "Err",
    "ErrorCategory",
    "ExecutionClient",
    "ExecutionClientError",
    "ExecutionRecord",
    "HttpStatusError",
    "MissingConfigError",
    "NetworkError",
    "Ok",
    "ParseError",
    "PipelineTimeoutError",
    "ProxyConfig",
    "Result",
    "RetryBudgetExceededError",
    "StopResult",
    "is_success",
    "run_pipeline",
]
