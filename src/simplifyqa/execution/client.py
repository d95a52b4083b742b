"""
HTTP client for the SimplifyQA pipeline-execution API.

``ExecutionClient`` turns three operations into authenticated requests against
a remote API and decodes the responses into :class:`ExecutionRecord` values:

============  ======  ==========================================
Operation     Method  Path
============  ======  ==========================================
start         POST    ``/pl/exec/start/{pipeline_id}``
poll_status   GET     ``/pl/exec/status/{project_id}/{execution_id}``
stop          PATCH   ``/pl/exec/stop/{project_id}/{execution_id}``
============  ======  ==========================================

Manifesto:
    The remote API owns the execution lifecycle; this client only asks. It
    therefore never raises across its boundary. ``start`` and ``poll_status``
    return a ``Result`` whose ``Err`` side tells transport failures, parse
    failures, rejected statuses and an exhausted retry budget apart, and
    ``stop`` hands back the raw status and body for the caller to judge.

Architecture:
    ::

        ExecutionClient
        ├── _open_client(use_proxy)  one httpx.Client per call, closed on exit
        │     headers: Authorization: Bearer <key>, Content-Type: application/json
        │     proxy:   ProxyConfig -> httpx.HTTPTransport(proxy=...)
        ├── start()        2xx -> record | empty body -> Ok(None)
        ├── poll_status()  2xx -> record | 500 -> sleep + retry | else -> Err
        │                  bounded by DeadlineRetry (60s budget, 5s delay)
        └── stop()         raw StopResult, direct connection, no retry

Examples:
    >>> client = ExecutionClient("https://qa.example.com", "secret")
    >>> started = client.start("1042")
    >>> match started:
    ...     case Ok(ExecutionRecord() as record):
    ...         status = client.poll_status(record.project_id, record.execution_id)
    ...     case Ok(None):
    ...         print("empty response")
    ...     case Err(error):
    ...         print(error.to_dict())

Tags:
    http-client, httpx, polling, retry, simplifyqa

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any

import httpx

from simplifyqa.core.errors import (
    ConfigError,
    ExecutionClientError,
    HttpStatusError,
    NetworkError,
    ParseError,
    RetryBudgetExceededError,
)
from simplifyqa.core.logging import DIAGNOSTICS_LOGGER, EXECUTION_LOGGER, get_logger
from simplifyqa.core.result import Err, Ok, Result
from simplifyqa.core.settings import ProxyConfig
from simplifyqa.execution.models import ExecutionRecord, StopResult
from simplifyqa.execution.retry import DeadlineRetry

RETRYABLE_STATUS = 500


class ExecutionClient:
    """Client for starting, polling and stopping remote pipeline executions.

    Args:
        api_url: Base URL of the API, without the ``/pl/exec`` suffix
        api_key: Bearer token
        proxy: Outbound HTTP proxy for ``start`` and ``poll_status``
        retry_policy: Polling budget and delay (default 60s / 5s)
        timeout: Per-request timeout in seconds
        transport: httpx transport to send requests through instead of the
            default network transport
        logger: Execution log for ``start`` and ``poll_status``
        diagnostics: Diagnostic log for ``stop`` failures
        proxy_on_stop: Route ``stop`` through ``proxy`` as well
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        *,
        proxy: ProxyConfig | None = None,
        retry_policy: DeadlineRetry | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        logger: Any = None,
        diagnostics: Any = None,
        proxy_on_stop: bool = False,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.proxy = proxy
        self.retry_policy = retry_policy or DeadlineRetry()
        self.timeout = timeout
        self.proxy_on_stop = proxy_on_stop
        self._transport = transport
        self.log = logger or get_logger(EXECUTION_LOGGER)
        self.diagnostics = diagnostics or get_logger(DIAGNOSTICS_LOGGER)

    # ── Operations ───────────────────────────────────────────────────────

    def start(self, pipeline_id: str | int) -> Result[ExecutionRecord | None]:
        """Start a pipeline execution.

        Returns:
            ``Ok(record)`` on a 2xx response with a JSON body, ``Ok(None)``
            when the 2xx body is empty, otherwise ``Err`` with a
            ``HttpStatusError``, ``NetworkError`` or ``ParseError`` (any other
            failure is wrapped in ``ExecutionClientError``).
        """
        url = f"{self.api_url}/pl/exec/start/{pipeline_id}"
        context = {"operation": "start", "url": url, "pipeline_id": str(pipeline_id)}

        try:
            with self._open_client() as client:
                response = client.post(url)

            self.log.info("response_received", method="POST", response_code=response.status_code)

            if not response.is_success:
                self.log.warning("api_call_failed", response_code=response.status_code)
                return Err(HttpStatusError(response.status_code, url=url).with_context(**context))

            body = _read_body(response)
            if not body.strip():
                self.log.info("empty_response_body", pipeline_id=str(pipeline_id))
                return Ok(None)

            record = ExecutionRecord.from_body(body)
        except httpx.HTTPError as e:
            self.log.error("api_call_error", method="POST", error=str(e))
            return Err(NetworkError(f"Error during API call (POST): {e}", cause=e).with_context(**context))
        except httpx.InvalidURL as e:
            self.log.error("api_call_error", method="POST", error=str(e))
            return Err(ConfigError(f"Invalid API URL: {e}", cause=e).with_context(**context))
        except ParseError as e:
            self.log.error("api_call_error", method="POST", error=e.message)
            return Err(e.with_context(**context))
        except Exception as e:
            self.log.error("api_call_error", method="POST", error=str(e))
            return Err(ExecutionClientError(
                f"Error during API call (POST): {e}", cause=e
            ).with_context(**context))

        self.log.info(
            "api_call_successful",
            project_id=record.project_id,
            execution_id=record.execution_id,
        )
        return Ok(record)

    def poll_status(
        self,
        project_id: str | int,
        execution_id: str | int,
    ) -> Result[ExecutionRecord]:
        """Fetch the status of an execution, retrying on HTTP 500.

        Retries continue while the policy's budget has not elapsed, checked
        once before each attempt. Any other non-2xx status, and any exception
        raised during an attempt (including from the retry sleep), ends the
        call immediately.
        """
        url = f"{self.api_url}/pl/exec/status/{project_id}/{execution_id}"
        context = {
            "operation": "poll_status",
            "url": url,
            "project_id": str(project_id),
            "execution_id": str(execution_id),
        }
        self.log.info("fetching_status", url=url)

        window = self.retry_policy.start()
        while not window.expired():
            attempt = window.begin_attempt()
            try:
                with self._open_client() as client:
                    response = client.get(url)

                if response.is_success:
                    record = ExecutionRecord.from_body(_read_body(response), require_status=True)
                    self.log.info("status_fetched", status=record.status, attempt=attempt)
                    return Ok(record)

                if response.status_code == RETRYABLE_STATUS:
                    self.log.warning(
                        "server_error_retrying",
                        response_code=response.status_code,
                        attempt=attempt,
                        delay=self.retry_policy.delay,
                    )
                    window.wait()
                    continue

                self.log.error("status_fetch_failed", response_code=response.status_code)
                return Err(HttpStatusError(
                    response.status_code,
                    f"Failed to fetch status, response code: {response.status_code}",
                    url=url,
                ).with_context(**context))
            except httpx.HTTPError as e:
                self.log.error("status_fetch_error", error=str(e), attempt=attempt)
                return Err(NetworkError(f"Error fetching status: {e}", cause=e).with_context(**context))
            except ParseError as e:
                self.log.error("status_fetch_error", error=e.message, attempt=attempt)
                return Err(e.with_context(**context))
            except Exception as e:
                self.log.error("status_fetch_error", error=str(e), attempt=attempt)
                return Err(ExecutionClientError(
                    f"Error fetching status: {e}", cause=e
                ).with_context(**context))

        self.log.error(
            "retry_duration_exceeded",
            elapsed_seconds=round(window.elapsed_seconds, 3),
            attempts=window.attempts,
        )
        return Err(RetryBudgetExceededError(
            window.elapsed_seconds, window.attempts
        ).with_context(**context))

    def stop(self, project_id: str | int, execution_id: str | int) -> StopResult:
        """Ask the API to stop an execution.

        The response status and body are returned verbatim for any status.
        When no response is received both fields are ``None`` and the error
        goes to the diagnostics log.
        """
        url = f"{self.api_url}/pl/exec/stop/{project_id}/{execution_id}"

        try:
            with self._open_client(use_proxy=self.proxy_on_stop) as client:
                with client.stream("PATCH", url) as response:
                    response.read()
                    result = StopResult(data=response.text, status=response.status_code)
        except Exception as e:
            self.diagnostics.error(
                "stop_execution_failed",
                error=f"Error in stopping the pipeline execution: {e}",
                url=url,
            )
            return StopResult()

        self.log.debug("stop_requested", response_code=result.status, url=url)
        return result

    # ── Connections ──────────────────────────────────────────────────────

    def _open_client(self, use_proxy: bool = True) -> httpx.Client:
        """Build an HTTP client for a single call."""
        routed = use_proxy and self.proxy is not None
        if routed:
            self.log.info("using_proxy", proxy=str(self.proxy))

        return httpx.Client(
            transport=self._transport_for(routed),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            trust_env=False,
        )

    def _transport_for(self, routed: bool) -> httpx.BaseTransport:
        if self._transport is not None:
            return self._transport
        if routed:
            return httpx.HTTPTransport(proxy=self.proxy.url)
        return httpx.HTTPTransport()

    def __repr__(self) -> str:
        return f"ExecutionClient(api_url={self.api_url!r}, proxy={self.proxy})"


def _read_body(response: httpx.Response) -> str:
    return response.content.decode("utf-8", errors="replace")


__all__ = [
    "ExecutionClient",
    "RETRYABLE_STATUS",
]
