"""Tests for structlog configuration."""

import json
import logging

import pytest
import structlog

from simplifyqa.core.logging import (
    DIAGNOSTICS_LOGGER,
    EXECUTION_LOGGER,
    LogContext,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_logger_names_are_distinct():
    assert EXECUTION_LOGGER != DIAGNOSTICS_LOGGER


def test_json_output_carries_service_and_logger(capsys):
    configure_logging(level="INFO", json_format=True, service="qa-build")

    get_logger("simplifyqa.test").info("status_fetched", status="RUNNING")

    line = capsys.readouterr().err.strip().splitlines()[-1]
    entry = json.loads(line)
    assert entry["event"] == "status_fetched"
    assert entry["status"] == "RUNNING"
    assert entry["service"] == "qa-build"
    assert entry["level"] == "info"
    assert entry["logger"] == "simplifyqa.test"
    assert "timestamp" in entry


def test_level_filters_debug(capsys):
    configure_logging(level="INFO", json_format=True)

    get_logger("simplifyqa.test").debug("hidden")

    assert "hidden" not in capsys.readouterr().err


def test_log_context_binds_and_unbinds():
    with LogContext(pipeline_id="1042"):
        assert structlog.contextvars.get_contextvars()["pipeline_id"] == "1042"

    assert "pipeline_id" not in structlog.contextvars.get_contextvars()
