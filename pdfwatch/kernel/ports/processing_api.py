"""Processing API port - the remote service that transforms PDFs.

Every call except ``aupload`` is an idempotent read keyed by the server's job
handle; ``aupload`` creates a new remote job each time it is called.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class JobStatusData(BaseModel):
    """``data`` object of a ``GET /jobs/<uuid>`` response."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    uuid: str | None = None
    status: str = ""
    progress: int | None = Field(default=None, ge=0, le=100)
    output_path: str | None = Field(
        default=None, validation_alias=AliasChoices("outputPath", "output_path")
    )
    output_filename: str | None = Field(
        default=None, validation_alias=AliasChoices("outputFilename", "output_filename")
    )
    error: str | None = None


class UsageStatus(BaseModel):
    """``data`` object of a ``GET /settings/usage-status`` response."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    plan: str
    limit: int
    used: int
    is_unlimited: bool = Field(
        default=False, validation_alias=AliasChoices("isUnlimited", "is_unlimited")
    )
    is_authenticated: bool = Field(
        default=False, validation_alias=AliasChoices("isAuthenticated", "is_authenticated")
    )
    batch_upload: bool = Field(
        default=False, validation_alias=AliasChoices("batchUpload", "batch_upload")
    )
    max_file_size_mb: int | None = Field(
        default=None, validation_alias=AliasChoices("maxFileSizeMb", "max_file_size_mb")
    )

    @property
    def remaining(self) -> int | None:
        """Jobs left this month, or None when the plan is unlimited."""
        if self.is_unlimited or self.limit < 0:
            return None
        return max(self.limit - self.used, 0)


@runtime_checkable
class ProcessingAPI(Protocol):
    """Port for the remote upload / poll / download service."""

    async def aupload(self, file_path: Path, tool: str, options: dict[str, Any]) -> str:
        """Upload a file for processing and return the remote job handle.

        Raises
        ------
        UnauthorizedError, JobLimitExceededError, FileTooLargeError, ServerError
        """
        ...

    async def aget_job(self, job_uuid: str) -> JobStatusData | None:
        """Fetch the current status of a remote job (one poll).

        Returns None when the server answered successfully but without data.
        """
        ...

    async def apoll_job(self, job_uuid: str) -> JobStatusData:
        """Poll until the job completes.

        Raises
        ------
        JobFailedError, JobTimeoutError, UnauthorizedError, ServerError
        """
        ...

    async def adownload(self, job_uuid: str, output_path: Path) -> int:
        """Download the result to ``output_path`` and return bytes written."""
        ...

    async def aget_usage_status(self) -> UsageStatus:
        """Fetch plan and quota information for the current token."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
