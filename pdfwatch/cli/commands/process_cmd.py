"""One-shot processing of a single file."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer

from pdfwatch.cli.utils import console, load_cli_config, print_json, wants_json
from pdfwatch.drivers.observer_manager.local import LocalObserverManager, LoggingObserver
from pdfwatch.drivers.processing_api import ProcessingApiClient
from pdfwatch.kernel.config import ApiConfig
from pdfwatch.kernel.domain.folders import FileReadyEvent, OutputMode, ToolConfig
from pdfwatch.kernel.domain.jobs import Job, JobStatus
from pdfwatch.kernel.domain.tools import get_tool
from pdfwatch.kernel.exceptions import PdfWatchError
from pdfwatch.kernel.ports.processing_api import ProcessingAPI
from pdfwatch.pipeline.processor import FileProcessor


def make_client(config: ApiConfig, token: str | None) -> ProcessingAPI:
    return ProcessingApiClient.from_config(config, token)


def parse_options(raw_options: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values that are valid JSON are decoded."""
    options: dict[str, Any] = {}
    for item in raw_options:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {item!r}", param_hint="--option")
        try:
            options[key] = json.loads(value)
        except ValueError:
            options[key] = value
    return options


def _output_mode(mode: str, output_dir: Path | None) -> OutputMode:
    if output_dir is not None:
        return OutputMode.custom(output_dir.expanduser().absolute())
    try:
        return OutputMode.parse(mode)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--output-mode") from e


async def _run(event: FileReadyEvent, api: ProcessingAPI, archive: bool) -> Job:
    async with LocalObserverManager() as observers:
        observers.register(LoggingObserver(), observer_id="log")
        try:
            return await FileProcessor(api, observers, archive=archive).process(event)
        finally:
            await api.aclose()


def process_file(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="PDF file to process", exists=True, dir_okay=False),
    tool: str = typer.Option(..., "--tool", "-t", help="Tool id, see 'pdfwatch tools'"),
    output_mode: str = typer.Option(
        "subfolder", "--output-mode", "-m", help="same-folder or subfolder"
    ),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Write the result into this directory instead"
    ),
    option: list[str] = typer.Option([], "--option", help="Tool option as key=value (repeatable)"),
    archive: bool = typer.Option(
        True, "--archive/--no-archive", help="Move the original into Originals/ afterwards"
    ),
) -> None:
    """Upload one file, wait for the result and download it."""
    config = load_cli_config(ctx)

    try:
        get_tool(tool)
    except PdfWatchError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    tool_config = ToolConfig(
        id=tool,
        output_mode=_output_mode(output_mode, output_dir),
        options=parse_options(option),
    )
    event = FileReadyEvent(
        path=file.expanduser().absolute(), tool_id=tool, tool_config=tool_config
    )

    api = make_client(config.api, config.auth_token)
    job = asyncio.run(_run(event, api, archive))

    if wants_json(ctx):
        print_json(job.to_dict())
    elif job.status is JobStatus.COMPLETED:
        console.print(f"[green]✓[/green] {file.name} processed to [cyan]{job.output_file}[/cyan]")
    else:
        console.print(f"[red]✗[/red] {file.name} failed: {job.error}")

    if job.status is not JobStatus.COMPLETED:
        raise typer.Exit(1)
