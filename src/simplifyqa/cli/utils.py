"""
CLI utility helpers — client construction and output formatting.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from simplifyqa.core.errors import ExecutionClientError
from simplifyqa.core.settings import ClientSettings
from simplifyqa.execution.client import ExecutionClient

console = Console()
err_console = Console(stderr=True)


def make_client(ctx: typer.Context) -> ExecutionClient:
    """Build a client from settings plus any ``--api-url``/``--api-key`` overrides."""
    overrides = {k: v for k, v in (ctx.obj or {}).items() if v is not None}
    try:
        return ClientSettings(**overrides).build_client()
    except (ExecutionClientError, ValidationError) as e:
        fail(e)


def fail(error: Exception) -> NoReturn:
    """Print an error and exit with status 1."""
    if isinstance(error, ExecutionClientError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {escape(str(error))}")
    raise typer.Exit(code=1)


def output(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a dict as JSON or key-value lines."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    # response values are opaque text, never markup
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {escape(str(v))}")
