"""Loguru setup shared by the watcher, the pipeline and the CLI.

Modules take a logger from :func:`get_logger` and log with loguru's ``{}``
formatting. Every record carries the module name and the correlation id of
the pipeline run that produced it (``-`` outside a run), so one file's journey
through upload, poll and download can be grepped out of a busy log.

>>> from pdfwatch.kernel.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.info("Watching {}", "/home/me/PDF/Compress")

The CLI calls :func:`configure_logging` once the config file is loaded::

    configure_logging(level="DEBUG", format="rich")
"""

from __future__ import annotations

import contextvars
import os
import sys
from contextlib import suppress
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger
from rich.logging import RichHandler

if TYPE_CHECKING:
    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json", "structured", "rich"]

# The pipeline sets this to the first 8 characters of the job id
correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="-")

_active_settings: dict[str, Any] | None = None
_sink_ids: list[int] = []


def _inject_correlation_id(record: Any) -> None:
    record["extra"]["cid"] = correlation_id.get()


def _stderr_sink(fmt: LogFormat, use_color: bool, include_timestamp: bool) -> dict[str, Any]:
    """Keyword arguments for ``logger.add`` writing ``fmt`` to stderr."""
    if fmt == "rich":
        handler = RichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=include_timestamp,
            show_path=True,
        )
        return {"sink": handler, "format": "{message}"}

    if fmt == "json":
        return {"sink": sys.stderr, "serialize": True}

    when = "{time:YYYY-MM-DD HH:mm:ss} " if include_timestamp else ""
    if fmt == "console":
        return {
            "sink": sys.stderr,
            "format": when + "{level: <8} | {extra[module]} | {message}",
            "colorize": False,
        }

    colorize = use_color and sys.stderr.isatty()
    if colorize:
        line = f"<green>{when}</green><level>{{level: <8}}</level> <cyan>{{extra[module]}}</cyan>"
    else:
        line = when + "{level: <8} {extra[module]}"
    return {
        "sink": sys.stderr,
        "format": line + " cid={extra[cid]} | {message}",
        "colorize": colorize,
    }


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "structured",
    output_file: str | Path | None = None,
    use_color: bool = True,
    include_timestamp: bool = True,
    force_reconfigure: bool = False,
    diagnose: bool = False,
) -> None:
    """Install pdfwatch's log sinks, replacing the ones installed before.

    Calling it again with identical settings does nothing.

    Parameters
    ----------
    level : LogLevel, default="INFO"
        Minimum level for every sink
    format : LogFormat, default="structured"
        ``console`` (plain), ``json`` (one object per line), ``structured``
        (module and correlation id, colored on a TTY) or ``rich``
    output_file : str | Path | None, default=None
        Also write JSON lines here, rotated at 10 MB and kept for a week
    use_color : bool, default=True
        Color the structured format when stderr is a TTY
    include_timestamp : bool, default=True
        Prefix console lines with the time
    force_reconfigure : bool, default=False
        Reinstall sinks even if the settings did not change
    diagnose : bool, default=False
        Show local variables in tracebacks; they may contain the auth token
    """
    global _active_settings

    settings = {
        "level": level,
        "format": format,
        "output_file": str(output_file) if output_file else None,
        "use_color": use_color,
        "include_timestamp": include_timestamp,
        "diagnose": diagnose,
    }
    if settings == _active_settings and not force_reconfigure:
        return

    if _active_settings is None:
        # Loguru's own stderr sink would print every line twice
        with suppress(ValueError):
            logger.remove(0)
    while _sink_ids:
        with suppress(ValueError):
            logger.remove(_sink_ids.pop())

    sinks = [_stderr_sink(format, use_color, include_timestamp)]
    if output_file:
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        sinks.append({
            "sink": path,
            "serialize": True,
            "rotation": "10 MB",
            "retention": "1 week",
            "compression": "zip",
        })

    for sink in sinks:
        _sink_ids.append(logger.add(level=level, backtrace=True, diagnose=diagnose, **sink))

    _active_settings = settings


@lru_cache(maxsize=256)
def get_logger(name: str) -> Logger:
    """Return a loguru logger bound to ``name`` that carries the correlation id."""
    _ensure_configured()
    return logger.bind(module=name, cid="-").patch(_inject_correlation_id)


def set_correlation_id(cid: str) -> contextvars.Token[str]:
    """Tag log records of the current task with ``cid``."""
    return correlation_id.set(cid)


def get_correlation_id() -> str:
    return correlation_id.get()


def reset_correlation_id(token: contextvars.Token[str]) -> None:
    correlation_id.reset(token)


def _ensure_configured() -> None:
    """Install default sinks, from PDFWATCH_LOG_* when set, before the first log line."""
    if _active_settings is None:
        level = os.getenv("PDFWATCH_LOG_LEVEL", "INFO").upper()
        fmt = os.getenv("PDFWATCH_LOG_FORMAT", "structured").lower()
        configure_logging(level=level, format=fmt)  # type: ignore[arg-type]
