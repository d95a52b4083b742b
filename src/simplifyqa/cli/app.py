"""
Root Typer application for the SimplifyQA CLI.

Connection values come from ``SIMPLIFYQA_*`` environment variables or ``.env``
and can be overridden with ``--api-url`` / ``--api-key``.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from typer import Typer

from simplifyqa.cli.utils import console, fail, make_client, output
from simplifyqa.core.logging import configure_logging
from simplifyqa.core.settings import ClientSettings

app = Typer(
    name="simplifyqa",
    help="simplifyqa — start, watch and stop remote pipeline executions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from simplifyqa import __version__

        typer.echo(f"simplifyqa {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    api_url: str | None = typer.Option(None, "--api-url", help="API base URL."),
    api_key: str | None = typer.Option(None, "--api-key", help="Bearer token."),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """simplifyqa CLI — drive pipeline executions from a build step."""
    overrides = {"log_level": log_level} if log_level else {}
    try:
        settings = ClientSettings(**overrides)
    except ValidationError as e:
        fail(e)
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
    )
    ctx.obj = {"api_url": api_url, "api_key": api_key}


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def start(
    ctx: typer.Context,
    pipeline_id: str = typer.Argument(..., help="Pipeline ID"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Start a pipeline execution."""
    client = make_client(ctx)
    result = client.start(pipeline_id)
    if result.is_err():
        fail(result.error)

    record = result.unwrap()
    if record is None:
        console.print("[yellow]Response body is empty.[/yellow]")
        raise typer.Exit(code=1)
    output(record.to_dict(), as_json=json_out, title="Execution started")


@app.command()
def status(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project ID"),
    execution_id: str = typer.Argument(..., help="Execution ID"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Fetch the status of an execution (retries on HTTP 500)."""
    client = make_client(ctx)
    result = client.poll_status(project_id, execution_id)
    if result.is_err():
        fail(result.error)
    output(result.unwrap().to_dict(), as_json=json_out, title="Execution status")


@app.command()
def stop(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project ID"),
    execution_id: str = typer.Argument(..., help="Execution ID"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Stop a running execution."""
    client = make_client(ctx)
    result = client.stop(project_id, execution_id)
    output(result.to_dict(), as_json=json_out, title="Stop")
    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def run(
    ctx: typer.Context,
    pipeline_id: str = typer.Argument(..., help="Pipeline ID"),
    interval: float | None = typer.Option(None, "--interval", "-i", help="Seconds between polls."),
    timeout: float | None = typer.Option(None, "--timeout", "-t", help="Stop the execution after N seconds."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Start a pipeline and wait for a terminal status."""
    from simplifyqa.execution.watch import is_success, run_pipeline

    client = make_client(ctx)
    poll_interval = interval if interval is not None else ClientSettings().watch_interval_seconds
    result = run_pipeline(client, pipeline_id, poll_interval=poll_interval, timeout=timeout)
    if result.is_err():
        fail(result.error)

    record = result.unwrap()
    output(record.to_dict(), as_json=json_out, title="Execution finished")
    if not is_success(record):
        raise typer.Exit(code=1)
