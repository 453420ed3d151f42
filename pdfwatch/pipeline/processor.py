"""Per-file processing pipeline.

One run drives one :class:`Job` through upload, poll, download and archive::

    pending -> uploading (10) -> processing (50) -> downloading (80) -> completed (100)

Any pipeline error moves the job to ``failed`` and ends that run only. Every
state change is reported as a :class:`JobStateChanged` event; the terminal
outcome as :class:`JobSucceeded` or :class:`JobFailed`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

from pdfwatch.drivers.observer_manager.local import NullObserverManager
from pdfwatch.kernel.domain.folders import FileReadyEvent
from pdfwatch.kernel.domain.jobs import Job, JobStatus
from pdfwatch.kernel.events import ArchiveFailed, JobFailed, JobStateChanged, JobSucceeded
from pdfwatch.kernel.exceptions import LocalIOError, PdfWatchError, PipelineError
from pdfwatch.kernel.logging import get_logger, reset_correlation_id, set_correlation_id
from pdfwatch.kernel.ports.observer_manager import ObserverManager
from pdfwatch.kernel.ports.processing_api import ProcessingAPI
from pdfwatch.pipeline.outputs import archive_original, compute_output_path

logger = get_logger(__name__)


class FileProcessor:
    """Runs the upload/poll/download/archive pipeline for ready files.

    Parameters
    ----------
    api : ProcessingAPI
        Remote service client.
    observer_manager : ObserverManager | None
        Receives job events; nothing is reported when None.
    archive : bool
        Move the original into ``Originals/`` after a successful run.
    """

    def __init__(
        self,
        api: ProcessingAPI,
        observer_manager: ObserverManager | None = None,
        *,
        archive: bool = True,
    ) -> None:
        self._api = api
        self._observers = observer_manager or NullObserverManager()
        self._archive = archive

    async def process(self, event: FileReadyEvent) -> Job:
        """Process one file; pipeline errors end up on the returned Job."""
        job = Job.new(event.tool_id, str(event.path))
        try:
            await self.run(event, job)
        except PdfWatchError as e:
            logger.debug("Job {} ended failed: {}", job.id, e)
        return job

    async def run(self, event: FileReadyEvent, job: Job | None = None) -> Path:
        """Process one file and return the output path.

        Raises
        ------
        PdfWatchError
            The pipeline error, after the job was marked failed and reported.
            Errors outside the PdfWatchError families arrive as PipelineError.
        """
        job = job or Job.new(event.tool_id, str(event.path))
        token = set_correlation_id(job.id[:8])
        try:
            try:
                output_path = await self._execute(job, event)
            except PdfWatchError as e:
                await self._fail(job, event.path, e)
                raise
            except Exception as e:
                error = PipelineError(e)
                logger.opt(exception=e).debug("Unexpected error in job {}", job.id)
                await self._fail(job, event.path, error)
                raise error from e
            await self._observers.notify(
                JobSucceeded(job_id=job.id, path=str(event.path), output_path=str(output_path))
            )
            return output_path
        finally:
            reset_correlation_id(token)

    async def _execute(self, job: Job, event: FileReadyEvent) -> Path:
        path = event.path
        config = event.tool_config
        logger.info("Processing {} with tool '{}'", path.name, event.tool_id)

        await self._advance(job, job.set_uploading)
        remote_id = await self._api.aupload(path, event.tool_id, config.options)

        await self._advance(job, lambda: job.set_processing(remote_id))
        await self._api.apoll_job(remote_id)

        output_path = compute_output_path(path, event.tool_id, config.output_mode)
        await self._advance(job, job.set_downloading)
        await self._api.adownload(remote_id, output_path)

        await self._advance(job, lambda: job.set_completed(str(output_path)))
        logger.info("{} processed to {}", path.name, output_path)

        if self._archive:
            await self._archive_original(job, path)
        return output_path

    async def _advance(self, job: Job, transition: Callable[[], JobStatus]) -> None:
        previous = transition()
        await self._observers.notify(
            JobStateChanged(
                job_id=job.id,
                path=job.input_file,
                from_status=str(previous),
                to_status=str(job.status),
                progress=job.progress,
            )
        )

    async def _fail(self, job: Job, path: Path, error: PdfWatchError) -> None:
        logger.error("Failed to process {}: {}", path.name, error)
        if not job.status.is_terminal:
            await self._advance(job, lambda: job.set_failed(str(error)))
        await self._observers.notify(JobFailed(job_id=job.id, path=str(path), error=error))

    async def _archive_original(self, job: Job, path: Path) -> None:
        try:
            await asyncio.to_thread(archive_original, path)
        except OSError as e:
            # The result is already written, so the job stays completed
            logger.warning("Could not move original file to Originals folder: {}", e)
            error = LocalIOError(str(path), str(e))
            await self._observers.notify(ArchiveFailed(job_id=job.id, path=str(path), error=error))


async def process_file_event(
    event: FileReadyEvent,
    api: ProcessingAPI,
    observer_manager: ObserverManager | None = None,
) -> Path:
    """Process one ready file and return its output path, raising on failure."""
    return await FileProcessor(api, observer_manager).run(event)
