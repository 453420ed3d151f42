"""Run the folder watcher and the processing pipeline until interrupted."""

from __future__ import annotations

import asyncio

import typer

from pdfwatch.cli.commands.process_cmd import make_client
from pdfwatch.cli.utils import console, load_cli_config
from pdfwatch.drivers.observer_manager.local import LocalObserverManager, LoggingObserver
from pdfwatch.kernel.config import PdfWatchConfig
from pdfwatch.kernel.exceptions import WatcherError
from pdfwatch.pipeline.dispatcher import PipelineDispatcher
from pdfwatch.watcher.folder_watcher import FolderWatcher


async def run_watch(config: PdfWatchConfig, stop: asyncio.Event | None = None) -> None:
    """Watch every enabled tool folder until ``stop`` is set or the task is cancelled."""
    stop = stop or asyncio.Event()

    async with LocalObserverManager() as observers:
        observers.register(LoggingObserver(), observer_id="log")

        async with FolderWatcher(config.watcher, observer_manager=observers) as watcher:
            dispatcher = PipelineDispatcher(
                watcher.subscribe(),
                api_factory=lambda token: make_client(config.api, token),
                token_provider=lambda: config.auth_token,
                observer_manager=observers,
            )
            dispatcher.start()
            try:
                for tool in config.enabled_tools():
                    try:
                        await watcher.add_folder(tool)
                    except WatcherError as e:
                        console.print(f"[red]{e}[/red]")
                await stop.wait()
            finally:
                await dispatcher.aclose(wait=True)


def watch(ctx: typer.Context) -> None:
    """Watch the configured folders and process new PDFs."""
    config = load_cli_config(ctx)

    tools = config.enabled_tools()
    if not tools:
        console.print("[yellow]No enabled tools with a folder configured, nothing to watch[/yellow]")
        raise typer.Exit(1)

    for tool in tools:
        console.print(f"Watching [cyan]{tool.folder_path}[/cyan] for [bold]{tool.id}[/bold]")
    if not config.auth_token:
        console.print("[yellow]No auth token configured, uploading anonymously[/yellow]")
    console.print("Press Ctrl+C to stop")

    try:
        asyncio.run(run_watch(config))
    except KeyboardInterrupt:
        console.print("Stopped")
