"""
Structured error types for the SimplifyQA execution client.

Every failure the client can observe is represented by a typed error carrying a
category, a retryable flag and an ``ErrorContext`` describing the request that
failed. Client operations never raise these across their boundary: they are
returned inside ``Err`` (see :mod:`simplifyqa.core.result`) so callers and
tests can tell a transport failure from a parse failure, a non-success status,
or an exhausted retry budget.

Manifesto:
    - **Typed failures:** One class per observable failure mode
    - **Retry semantics:** Every error knows whether repeating the call helps
    - **Rich context:** URL, HTTP status and execution ids travel with the error
    - **Log-ready:** ``to_dict()`` feeds structlog key/value pairs directly

Architecture:
    ::

        ExecutionClientError (INTERNAL)
        ├── TransientError (NETWORK, retryable)
        │   └── NetworkError
        ├── HttpStatusError (SOURCE, retryable for 5xx)
        ├── RetryBudgetExceededError (NETWORK)
        ├── ParseError (PARSE)
        ├── PipelineTimeoutError (PIPELINE)
        └── ConfigError (CONFIG)
            └── MissingConfigError

Examples:
    >>> error = HttpStatusError(503, url="https://qa.example.com/pl/exec/status/1/2")
    >>> error.category
    <ErrorCategory.SOURCE: 'SOURCE'>
    >>> error.retryable
    True
    >>> error.to_dict()["context"]["http_status"]
    503

Tags:
    errors, error-hierarchy, retry-logic, error-context, simplifyqa

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Classification of client errors for logging and caller branching.

    Attributes:
        NETWORK: Connection refused, timeout, DNS, exhausted retry budget
        SOURCE: The API answered with a non-success status
        PARSE: Response body could not be decoded into an execution record
        CONFIG: Missing or invalid client settings
        PIPELINE: The watched execution did not reach a terminal status in time
        INTERNAL: Unexpected state, interrupted sleeps
    """

    NETWORK = "NETWORK"
    SOURCE = "SOURCE"
    PARSE = "PARSE"
    CONFIG = "CONFIG"
    PIPELINE = "PIPELINE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are emitted by ``to_dict()``, so the context can be
    splatted into a structlog call without noise.

    Attributes:
        operation: Client operation name (``start``, ``poll_status``, ``stop``)
        url: URL that was being accessed
        http_status: HTTP status code if a response was received
        pipeline_id: Pipeline being started
        project_id: Project of the execution
        execution_id: Execution identifier
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    url: str | None = None
    http_status: int | None = None
    pipeline_id: str | None = None
    project_id: str | None = None
    execution_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "url", "http_status", "pipeline_id",
                    "project_id", "execution_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ExecutionClientError(Exception):
    """
    Base exception for all execution client errors.

    All instances carry:
    - **category:** ErrorCategory for classification
    - **retryable:** whether the same call may succeed if repeated
    - **context:** ErrorContext with request metadata
    - **cause:** the underlying exception, also chained as ``__cause__``

    Subclasses set ``default_category`` and ``default_retryable``.

    Examples:
        >>> error = ExecutionClientError("Sleep interrupted")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(operation="poll_status").context.operation
        'poll_status'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ExecutionClientError:
        """
        Add context to this error (fluent API).

        Usage:
            return Err(ParseError("Unexpected type for id").with_context(
                operation="start",
                url=url,
            ))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS
# =============================================================================


class TransientError(ExecutionClientError):
    """Temporary error that may succeed on retry."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Connection refused, timeout or other transport-level I/O failure."""

    default_category = ErrorCategory.NETWORK


class RetryBudgetExceededError(ExecutionClientError):
    """
    Polling kept receiving HTTP 500 until the wall-clock budget ran out.

    Not retryable itself: the budget already bounds how long the caller is
    willing to wait.
    """

    default_category = ErrorCategory.NETWORK

    def __init__(
        self,
        elapsed_seconds: float,
        attempts: int,
        message: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(
            message or f"Retry duration exceeded after {attempts} attempts ({elapsed_seconds:.1f}s)",
            **kwargs,
        )
        self.elapsed_seconds = elapsed_seconds
        self.attempts = attempts
        self.context.metadata.setdefault("attempts", attempts)
        self.context.metadata.setdefault("elapsed_seconds", round(elapsed_seconds, 3))


# =============================================================================
# RESPONSE ERRORS
# =============================================================================


class HttpStatusError(ExecutionClientError):
    """The API answered outside the accepted status range."""

    default_category = ErrorCategory.SOURCE

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        *,
        url: str | None = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("retryable", status_code >= 500)
        super().__init__(message or f"API call failed with response code: {status_code}", **kwargs)
        self.status_code = status_code
        self.context.http_status = status_code
        if url is not None:
            self.context.url = url


class ParseError(ExecutionClientError):
    """Response body is not valid JSON or lacks a well-typed required field."""

    default_category = ErrorCategory.PARSE


class PipelineTimeoutError(ExecutionClientError):
    """A watched execution did not reach a terminal status before the deadline."""

    default_category = ErrorCategory.PIPELINE


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(ExecutionClientError):
    """Configuration error (not retryable)."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration value is missing."""

    def __init__(self, key: str, message: str | None = None):
        super().__init__(message or f"Missing required config: {key}")
        self.key = key


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ExecutionClientError",
    "TransientError",
    "NetworkError",
    "RetryBudgetExceededError",
    "HttpStatusError",
    "ParseError",
    "PipelineTimeoutError",
    "ConfigError",
    "MissingConfigError",
]
