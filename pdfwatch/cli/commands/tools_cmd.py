"""List the processing tools offered by the service."""

from __future__ import annotations

from dataclasses import asdict

import typer
from rich.table import Table

from pdfwatch.cli.utils import console, print_json, wants_json
from pdfwatch.kernel.domain.tools import get_available_tools


def list_tools(ctx: typer.Context) -> None:
    """Show the tool catalog."""
    tools = get_available_tools()

    if wants_json(ctx):
        print_json([asdict(tool) for tool in tools])
        return

    table = Table(title="Available tools")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Output", style="green")
    table.add_column("Options", justify="center")

    for tool in tools:
        table.add_row(
            tool.id,
            tool.name,
            tool.description,
            tool.output_extension,
            "yes" if tool.has_options else "",
        )

    console.print(table)
