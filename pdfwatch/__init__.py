"""pdfwatch - watch folders for PDFs and run them through pdf.dk tools.

Files dropped into a watched folder are debounced, matched to the folder's
tool configuration, uploaded for processing, and the result is written next
to (or below) the original, which is then archived under ``Originals/``.
"""

# Version is defined in pyproject.toml and read dynamically
try:
    from importlib.metadata import version

    __version__ = version("pdfwatch")
except Exception:
    __version__ = "0.0.0.dev0"  # Fallback for development installs

from pdfwatch.kernel.config import PdfWatchConfig, load_config
from pdfwatch.kernel.domain import FileReadyEvent, Job, JobStatus, OutputMode, ToolConfig

__all__ = [
    "__version__",
    "FileReadyEvent",
    "Job",
    "JobStatus",
    "OutputMode",
    "PdfWatchConfig",
    "ToolConfig",
    "load_config",
]
