"""CLI commands for pdfwatch."""

from pdfwatch.cli.commands import process_cmd, tools_cmd, usage_cmd, watch_cmd

__all__ = ["process_cmd", "tools_cmd", "usage_cmd", "watch_cmd"]
