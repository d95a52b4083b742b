"""Tests for the ``simplifyqa`` CLI commands."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from simplifyqa.cli.app import app
from simplifyqa.core.errors import HttpStatusError, RetryBudgetExceededError
from simplifyqa.core.result import Err, Ok
from simplifyqa.execution.models import ExecutionRecord, StopResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("simplifyqa.cli.app.configure_logging"):
        yield


@pytest.fixture
def client():
    client = MagicMock()
    with patch("simplifyqa.cli.app.make_client", return_value=client):
        yield client


class TestStart:
    def test_start_success(self, client):
        client.start.return_value = Ok(ExecutionRecord("42", "7"))

        result = runner.invoke(app, ["start", "1042"])

        assert result.exit_code == 0
        assert "42" in result.output
        client.start.assert_called_once_with("1042")

    def test_start_json(self, client):
        client.start.return_value = Ok(ExecutionRecord("42", "7"))

        result = runner.invoke(app, ["start", "1042", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"project_id": "42", "execution_id": "7"}

    def test_start_error(self, client):
        client.start.return_value = Err(HttpStatusError(401))

        result = runner.invoke(app, ["start", "1042"])

        assert result.exit_code == 1

    def test_start_empty_body(self, client):
        client.start.return_value = Ok(None)

        result = runner.invoke(app, ["start", "1042"])

        assert result.exit_code == 1


class TestStatus:
    def test_status_success(self, client):
        client.poll_status.return_value = Ok(ExecutionRecord("42", "7", "RUNNING"))

        result = runner.invoke(app, ["status", "42", "7"])

        assert result.exit_code == 0
        assert "RUNNING" in result.output
        client.poll_status.assert_called_once_with("42", "7")

    def test_status_budget_exceeded(self, client):
        client.poll_status.return_value = Err(RetryBudgetExceededError(60.0, 12))

        result = runner.invoke(app, ["status", "42", "7"])

        assert result.exit_code == 1


class TestStop:
    def test_stop_success(self, client):
        client.stop.return_value = StopResult("OK", 200)

        result = runner.invoke(app, ["stop", "42", "7", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"data": "OK", "status": 200}

    def test_stop_body_is_printed_verbatim(self, client):
        client.stop.return_value = StopResult('{"msg": "[/bold] done"}', 200)

        result = runner.invoke(app, ["stop", "42", "7"])

        assert result.exit_code == 0
        assert "[/bold] done" in result.output

    def test_status_value_is_not_markup(self, client):
        client.poll_status.return_value = Ok(ExecutionRecord("42", "7", "[red]RUNNING"))

        result = runner.invoke(app, ["status", "42", "7"])

        assert result.exit_code == 0
        assert "[red]RUNNING" in result.output

    @pytest.mark.parametrize("stop_result", [StopResult(), StopResult("not running", 409)])
    def test_stop_failure(self, client, stop_result):
        client.stop.return_value = stop_result

        result = runner.invoke(app, ["stop", "42", "7"])

        assert result.exit_code == 1


class TestRun:
    @patch("simplifyqa.execution.watch.run_pipeline")
    def test_run_success(self, mock_run, client):
        mock_run.return_value = Ok(ExecutionRecord("42", "7", "COMPLETED"))

        result = runner.invoke(app, ["run", "1042", "--interval", "2", "--timeout", "600"])

        assert result.exit_code == 0
        mock_run.assert_called_once_with(client, "1042", poll_interval=2.0, timeout=600.0)

    @patch("simplifyqa.execution.watch.run_pipeline")
    def test_run_failed_status(self, mock_run, client):
        mock_run.return_value = Ok(ExecutionRecord("42", "7", "FAILED"))

        result = runner.invoke(app, ["run", "1042", "--interval", "2"])

        assert result.exit_code == 1

    @patch("simplifyqa.execution.watch.run_pipeline")
    def test_run_error(self, mock_run, client):
        mock_run.return_value = Err(HttpStatusError(404))

        result = runner.invoke(app, ["run", "1042", "--interval", "2"])

        assert result.exit_code == 1


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "simplifyqa" in result.output

    def test_missing_configuration_exits(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SIMPLIFYQA_API_URL", raising=False)
        monkeypatch.delenv("SIMPLIFYQA_API_KEY", raising=False)

        result = runner.invoke(app, ["start", "1042"])

        assert result.exit_code == 1

    def test_overrides_reach_settings(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        built = MagicMock()
        built.start.return_value = Ok(ExecutionRecord("1", "2"))

        with patch("simplifyqa.cli.utils.ClientSettings") as mock_settings:
            mock_settings.return_value.build_client.return_value = built
            result = runner.invoke(
                app, ["--api-url", "https://qa.example.com", "--api-key", "k", "start", "5"],
            )

        assert result.exit_code == 0
        mock_settings.assert_called_once_with(api_url="https://qa.example.com", api_key="k")

    def test_invalid_environment_setting_exits_cleanly(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SIMPLIFYQA_PROXY_PORT", "abc")

        result = runner.invoke(app, ["start", "1042"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_unknown_log_level_exits_cleanly(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SIMPLIFYQA_LOG_LEVEL", raising=False)

        result = runner.invoke(app, ["--log-level", "chatty", "start", "1042"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
