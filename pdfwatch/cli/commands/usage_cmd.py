"""Show plan and monthly quota for the configured token."""

from __future__ import annotations

import asyncio

import typer

from pdfwatch.cli.commands.process_cmd import make_client
from pdfwatch.cli.utils import console, load_cli_config, print_json, wants_json
from pdfwatch.kernel.exceptions import PdfWatchError
from pdfwatch.kernel.ports.processing_api import ProcessingAPI, UsageStatus


async def _fetch(api: ProcessingAPI) -> UsageStatus:
    try:
        return await api.aget_usage_status()
    finally:
        await api.aclose()


def show_usage(ctx: typer.Context) -> None:
    """Print the usage status reported by the service."""
    config = load_cli_config(ctx)
    api = make_client(config.api, config.auth_token)

    try:
        usage = asyncio.run(_fetch(api))
    except PdfWatchError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    if wants_json(ctx):
        print_json(usage.model_dump())
        return

    console.print(f"Plan: [bold]{usage.plan}[/bold]")
    if usage.remaining is None:
        console.print(f"Jobs used: {usage.used} (unlimited)")
    else:
        console.print(f"Jobs used: {usage.used}/{usage.limit} ({usage.remaining} remaining)")
    if usage.max_file_size_mb is not None:
        console.print(f"Max file size: {usage.max_file_size_mb} MB")
