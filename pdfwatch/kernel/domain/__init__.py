"""Domain models for watched folders, tools and processing jobs."""

from pdfwatch.kernel.domain.folders import FileReadyEvent, OutputMode, ToolConfig, WatchedFolder
from pdfwatch.kernel.domain.jobs import (
    PHASE_PROGRESS,
    Job,
    JobStatus,
    RemoteJobStatus,
    is_valid_transition,
)
from pdfwatch.kernel.domain.tools import (
    ToolDefinition,
    get_available_tools,
    get_tool,
    output_extension,
)

__all__ = [
    "FileReadyEvent",
    "OutputMode",
    "ToolConfig",
    "WatchedFolder",
    "PHASE_PROGRESS",
    "Job",
    "JobStatus",
    "RemoteJobStatus",
    "is_valid_transition",
    "ToolDefinition",
    "get_available_tools",
    "get_tool",
    "output_extension",
]
