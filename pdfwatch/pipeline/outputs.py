"""Output naming and archiving of processed originals."""

from __future__ import annotations

import shutil
import time
from pathlib import Path

from pdfwatch.kernel.domain.folders import OutputMode
from pdfwatch.kernel.domain.tools import output_extension
from pdfwatch.kernel.logging import get_logger
from pdfwatch.watcher.registry import PROCESSED_DIR_NAME

logger = get_logger(__name__)

ORIGINALS_DIR_NAME = "Originals"


def output_filename(input_path: Path, tool_id: str) -> str:
    """``<stem>_<tool>.<ext>``, e.g. ``report_pdf-to-word.docx``."""
    stem = input_path.stem or "output"
    return f"{stem}_{tool_id}.{output_extension(tool_id)}"


def compute_output_path(input_path: Path, tool_id: str, output_mode: OutputMode) -> Path:
    """Where the result for ``input_path`` is written under ``output_mode``."""
    filename = output_filename(input_path, tool_id)
    match output_mode.kind:
        case "same-folder":
            return input_path.parent / filename
        case "subfolder":
            return input_path.parent / PROCESSED_DIR_NAME / filename
        case "custom":
            return Path(output_mode.path or input_path.parent) / filename
    raise ValueError(f"Unknown output mode: {output_mode.kind!r}")


def archive_original(input_path: Path, now: int | None = None) -> Path:
    """Move ``input_path`` into a sibling ``Originals`` folder.

    An existing file of the same name is never overwritten; the moved file
    gets a ``_<unix seconds>`` suffix instead.

    Raises
    ------
    OSError
        If the folder cannot be created or the move fails
    """
    originals = input_path.parent / ORIGINALS_DIR_NAME
    originals.mkdir(parents=True, exist_ok=True)

    destination = originals / input_path.name
    if destination.exists():
        timestamp = int(time.time()) if now is None else now
        suffix = input_path.suffix or ".pdf"
        destination = originals / f"{input_path.stem}_{timestamp}{suffix}"

    shutil.move(input_path, destination)
    logger.info("Moved original file to: {}", destination)
    return destination
