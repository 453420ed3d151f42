"""CLI helper utilities for pdfwatch commands."""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console

from pdfwatch.kernel.config import PdfWatchConfig, load_config
from pdfwatch.kernel.exceptions import ConfigurationError
from pdfwatch.kernel.logging import configure_logging

console = Console()


def wants_json(ctx: typer.Context) -> bool:
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return obj.get("output_format") == "json"


def print_json(data: Any) -> None:
    typer.echo(json.dumps(data, default=str, indent=2))


def load_cli_config(ctx: typer.Context) -> PdfWatchConfig:
    """Load the configuration named by the global options and set up logging.

    ``--log-level`` on the command line wins over the config file.
    """
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    try:
        config = load_config(obj.get("config_path"))
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    level = obj.get("log_level") or config.logging.level
    configure_logging(
        level=level,
        format=config.logging.format,
        output_file=config.logging.output_file,
        use_color=config.logging.use_color,
        include_timestamp=config.logging.include_timestamp,
    )
    return config
