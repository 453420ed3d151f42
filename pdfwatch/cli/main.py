"""pdfwatch CLI - Main entrypoint."""

import typer
from rich.console import Console

from pdfwatch import __version__
from pdfwatch.cli.commands import process_cmd, tools_cmd, usage_cmd, watch_cmd

# Create the main Typer app
app = typer.Typer(
    name="pdfwatch",
    help="pdfwatch - watch folders and process dropped PDFs with pdf.dk tools.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

app.command("tools", help="List available processing tools")(tools_cmd.list_tools)
app.command("watch", help="Watch configured folders and process new PDFs")(watch_cmd.watch)
app.command("process", help="Process a single file")(process_cmd.process_file)
app.command("usage", help="Show plan and monthly job usage")(usage_cmd.show_usage)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold blue]pdfwatch[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    config: str | None = typer.Option(
        None, "--config", "-c", help="Path to pdfwatch.toml (or .yaml)", envvar="PDFWATCH_CONFIG_PATH"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level: debug|info|warning|error"
    ),
    json_out: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """pdfwatch CLI.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    if ctx.obj is None:
        ctx.obj = {}

    effective_level = log_level.upper() if log_level else None
    if effective_level == "WARN":
        effective_level = "WARNING"

    ctx.obj.update({
        "config_path": config,
        "log_level": effective_level,
        "output_format": "json" if json_out else "pretty",
    })


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
