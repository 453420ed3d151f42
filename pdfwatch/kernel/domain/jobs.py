"""Domain models for processing jobs.

Two separate notions of "status" live here:

- :class:`JobStatus` is the local lifecycle of one pipeline run, driven only by
  the pipeline (pending → uploading → processing → downloading → completed,
  or failed from any non-terminal state).
- :class:`RemoteJobStatus` is what the server reports while a job is being
  polled. It is a closed variant with an explicit ``Unknown`` case carrying the
  raw text, so the poll loop never compares bare strings.

Example::

    job = Job.new("compress", "/in/report.pdf")
    job.set_uploading()
    job.set_processing()
    job.set_downloading()
    job.set_completed("/in/Processed/report_compress.pdf")
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar

from pdfwatch.kernel.exceptions import InvalidTransitionError


class JobStatus(StrEnum):
    """Local lifecycle state of a job."""

    PENDING = "pending"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    DOWNLOADING = "downloading"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.UPLOADING, JobStatus.FAILED}),
    JobStatus.UPLOADING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.DOWNLOADING, JobStatus.FAILED}),
    JobStatus.DOWNLOADING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}

# Coarse phase markers, not byte progress
PHASE_PROGRESS: dict[JobStatus, int] = {
    JobStatus.UPLOADING: 10,
    JobStatus.PROCESSING: 50,
    JobStatus.DOWNLOADING: 80,
    JobStatus.COMPLETED: 100,
}


def is_valid_transition(from_status: JobStatus, to_status: JobStatus) -> bool:
    """Check if a lifecycle transition is allowed."""
    return to_status in _TRANSITIONS[from_status]


def _now() -> int:
    return int(time.time())


@dataclass(slots=True)
class Job:
    """One remote processing request, owned by the pipeline run driving it."""

    tool_id: str
    input_file: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    output_file: str | None = None
    status: JobStatus = JobStatus.PENDING
    progress: int | None = None
    error: str | None = None
    created_at: int = field(default_factory=_now)
    completed_at: int | None = None
    remote_id: str | None = None

    @classmethod
    def new(cls, tool_id: str, input_file: str) -> Job:
        return cls(tool_id=tool_id, input_file=input_file)

    def _transition(self, to_status: JobStatus) -> JobStatus:
        if not is_valid_transition(self.status, to_status):
            msg = f"Job {self.id}: cannot go from {self.status} to {to_status}"
            raise InvalidTransitionError(msg)
        previous = self.status
        self.status = to_status
        if to_status in PHASE_PROGRESS:
            self.progress = PHASE_PROGRESS[to_status]
        return previous

    def set_uploading(self) -> JobStatus:
        return self._transition(JobStatus.UPLOADING)

    def set_processing(self, remote_id: str | None = None) -> JobStatus:
        previous = self._transition(JobStatus.PROCESSING)
        if remote_id is not None:
            self.remote_id = remote_id
        return previous

    def set_downloading(self) -> JobStatus:
        return self._transition(JobStatus.DOWNLOADING)

    def set_completed(self, output_file: str) -> JobStatus:
        previous = self._transition(JobStatus.COMPLETED)
        self.output_file = output_file
        self.completed_at = _now()
        return previous

    def set_failed(self, error: str) -> JobStatus:
        previous = self._transition(JobStatus.FAILED)
        self.error = error
        self.completed_at = _now()
        return previous

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase keys the desktop frontend expects."""
        return {
            "id": self.id,
            "toolId": self.tool_id,
            "inputFile": self.input_file,
            "outputFile": self.output_file,
            "status": str(self.status),
            "progress": self.progress,
            "error": self.error,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
        }


# ============================================================================
# Remote job status
# ============================================================================


@dataclass(frozen=True, slots=True)
class RemoteJobStatus:
    """Base class of the normalized status reported by the server."""

    is_done: ClassVar[bool] = False

    @staticmethod
    def parse(raw: str) -> RemoteJobStatus:
        """Normalize a server status string (case-insensitive)."""
        normalized = raw.strip().lower()
        match normalized:
            case "queued":
                return Queued()
            case "processing":
                return Processing()
            case "completed" | "done":
                return Completed()
            case "failed" | "error":
                return Failed()
            case _:
                return Unknown(raw=raw)


@dataclass(frozen=True, slots=True)
class Queued(RemoteJobStatus):
    """The job is waiting for a worker."""


@dataclass(frozen=True, slots=True)
class Processing(RemoteJobStatus):
    """A worker is processing the job."""


@dataclass(frozen=True, slots=True)
class Completed(RemoteJobStatus):
    """The result is ready to download."""

    is_done: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class Failed(RemoteJobStatus):
    """The server gave up on the job."""

    is_done: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class Unknown(RemoteJobStatus):
    """A status string this client does not recognise."""

    raw: str = ""
