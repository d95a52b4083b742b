"""Build-step lifecycle: start a pipeline and wait for it to finish.

``run_pipeline`` is what a CI build step does with the client: start the
pipeline, poll its status until it reaches a terminal status, and stop the
remote execution if the step gives up (deadline reached) or is aborted
(``KeyboardInterrupt``).

Example:
    >>> client = ClientSettings().build_client()
    >>> result = run_pipeline(client, "1042", poll_interval=10, timeout=1800)
    >>> if result.is_ok() and is_success(result.unwrap()):
    ...     print("pipeline passed")
"""

from __future__ import annotations

import time
from typing import Callable, Collection

from simplifyqa.core.errors import ParseError, PipelineTimeoutError
from simplifyqa.core.logging import EXECUTION_LOGGER, LogContext, get_logger
from simplifyqa.core.result import Err, Ok, Result
from simplifyqa.execution.client import ExecutionClient
from simplifyqa.execution.models import ExecutionRecord

DEFAULT_TERMINAL_STATUSES = frozenset({
    "COMPLETED", "PASSED", "FAILED", "STOPPED", "ABORTED", "ERROR", "CANCELLED",
})
DEFAULT_SUCCESS_STATUSES = frozenset({"COMPLETED", "PASSED"})

logger = get_logger(EXECUTION_LOGGER)


def is_terminal(record: ExecutionRecord, terminal_statuses: Collection[str] = DEFAULT_TERMINAL_STATUSES) -> bool:
    return record.status is not None and record.status.upper() in terminal_statuses


def is_success(record: ExecutionRecord, success_statuses: Collection[str] = DEFAULT_SUCCESS_STATUSES) -> bool:
    return record.status is not None and record.status.upper() in success_statuses


def run_pipeline(
    client: ExecutionClient,
    pipeline_id: str | int,
    *,
    poll_interval: float = 10.0,
    timeout: float | None = None,
    terminal_statuses: Collection[str] = DEFAULT_TERMINAL_STATUSES,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Result[ExecutionRecord]:
    """Start ``pipeline_id`` and poll until its status is terminal.

    Args:
        client: Client used for every request
        pipeline_id: Pipeline to start
        poll_interval: Seconds between status polls
        timeout: Give up (and stop the execution) after this many seconds;
            ``None`` waits indefinitely
        terminal_statuses: Upper-case statuses that end the watch
        sleep: Blocking sleep function
        clock: Monotonic time source

    Returns:
        ``Ok`` with the terminal record, or the first ``Err`` from starting or
        polling, or ``Err(PipelineTimeoutError)`` after the deadline.

    Raises:
        KeyboardInterrupt: re-raised after the execution has been stopped
    """
    terminal = {status.upper() for status in terminal_statuses}

    started = client.start(pipeline_id)
    if started.is_err():
        return started
    record = started.unwrap()
    if record is None:
        return Err(ParseError("Start response did not describe an execution").with_context(
            operation="start", pipeline_id=str(pipeline_id)
        ))

    deadline = None if timeout is None else clock() + timeout

    # client log lines carry the execution ids while the watch runs
    with LogContext(project_id=record.project_id, execution_id=record.execution_id):
        logger.info("watch_started", pipeline_id=str(pipeline_id), poll_interval=poll_interval)
        try:
            while True:
                polled = client.poll_status(record.project_id, record.execution_id)
                if polled.is_err():
                    logger.error("watch_failed", error=str(polled.error))
                    return polled

                current = polled.unwrap()
                if is_terminal(current, terminal):
                    logger.info("watch_finished", status=current.status)
                    return Ok(current)

                if deadline is not None and clock() >= deadline:
                    stopped = client.stop(record.project_id, record.execution_id)
                    logger.warning("watch_timed_out", timeout=timeout, stop_status=stopped.status)
                    return Err(PipelineTimeoutError(
                        f"Execution did not finish within {timeout}s (last status: {current.status})"
                    ).with_context(
                        pipeline_id=str(pipeline_id),
                        project_id=record.project_id,
                        execution_id=record.execution_id,
                        last_status=current.status,
                    ))

                logger.debug("watch_waiting", status=current.status)
                sleep(poll_interval)
        except KeyboardInterrupt:
            stopped = client.stop(record.project_id, record.execution_id)
            logger.warning("watch_aborted", stop_status=stopped.status)
            raise


__all__ = [
    "DEFAULT_TERMINAL_STATUSES",
    "DEFAULT_SUCCESS_STATUSES",
    "is_terminal",
    "is_success",
    "run_pipeline",
]
