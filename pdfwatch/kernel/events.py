"""Event data classes reported through the observer manager.

The watcher and the pipeline never print or buffer log lines for the UI.
They emit these events, and whoever is interested (a desktop notifier, a
log sink, a test) registers an observer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class Event:
    """Base class for all events - provides timestamp."""

    timestamp: datetime = field(default_factory=datetime.now, init=False)

    def log_message(self) -> str:
        """Get a formatted log message for this event."""
        return f"{self.__class__.__name__} at {self.timestamp.isoformat()}"


# Watcher events
@dataclass(slots=True)
class WatchStarted(Event):
    """The stabilizer task is running."""

    debounce_seconds: float
    scan_interval: float

    def log_message(self) -> str:
        return f"Watcher started (debounce {self.debounce_seconds}s, scan every {self.scan_interval}s)"


@dataclass(slots=True)
class FolderAdded(Event):
    """A folder is now watched for a tool."""

    folder: str
    tool_id: str

    def log_message(self) -> str:
        return f"Watching {self.folder} for tool '{self.tool_id}'"


@dataclass(slots=True)
class FolderRemoved(Event):
    """A folder is no longer watched."""

    folder: str

    def log_message(self) -> str:
        return f"Stopped watching {self.folder}"


@dataclass(slots=True)
class FileReady(Event):
    """A file stabilized and resolved to a tool."""

    path: str
    tool_id: str

    def log_message(self) -> str:
        return f"File ready: {self.path} (tool '{self.tool_id}')"


@dataclass(slots=True)
class FileIgnored(Event):
    """A file stabilized but no registered folder contains it."""

    path: str

    def log_message(self) -> str:
        return f"No watched folder matches {self.path}, ignoring"


# Pipeline events
@dataclass(slots=True)
class JobStateChanged(Event):
    """A job moved to a new lifecycle state."""

    job_id: str
    path: str
    from_status: str
    to_status: str
    progress: int | None = None

    def log_message(self) -> str:
        pct = f" ({self.progress}%)" if self.progress is not None else ""
        return f"Job {self.job_id}: {self.from_status} -> {self.to_status}{pct}"


@dataclass(slots=True)
class JobSucceeded(Event):
    """Terminal success: the result was written."""

    job_id: str
    path: str
    output_path: str

    def log_message(self) -> str:
        return f"{self.path} processed to {self.output_path}"


@dataclass(slots=True)
class JobFailed(Event):
    """Terminal failure of one pipeline run."""

    job_id: str
    path: str
    error: Exception

    def log_message(self) -> str:
        return f"{self.path} failed: {self.error}"


@dataclass(slots=True)
class ArchiveFailed(Event):
    """The result was written but the original could not be moved to Originals."""

    job_id: str
    path: str
    error: Exception

    def log_message(self) -> str:
        return f"Could not move {self.path} to Originals: {self.error}"


__all__ = [
    "Event",
    "WatchStarted",
    "FolderAdded",
    "FolderRemoved",
    "FileReady",
    "FileIgnored",
    "JobStateChanged",
    "JobSucceeded",
    "JobFailed",
    "ArchiveFailed",
]
