"""Processing API driver using httpx.AsyncClient.

This driver implements the :class:`~pdfwatch.kernel.ports.processing_api.ProcessingAPI`
protocol against the pdf.dk REST API: multipart upload, status polling and
binary download of the result.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import pydantic

from pdfwatch.kernel.domain.jobs import Completed, Failed, RemoteJobStatus
from pdfwatch.kernel.exceptions import (
    FileTooLargeError,
    JobFailedError,
    JobLimitExceededError,
    JobTimeoutError,
    LocalIOError,
    NetworkError,
    ServerError,
    UnauthorizedError,
)
from pdfwatch.kernel.logging import get_logger
from pdfwatch.kernel.ports.processing_api import JobStatusData, UsageStatus

if TYPE_CHECKING:
    from pdfwatch.kernel.config.models import ApiConfig

logger = get_logger(__name__)

_JSON = "application/json"
_BINARY = "application/octet-stream"

# Used when a 413 response does not say what the plan allows
DEFAULT_MAX_FILE_SIZE_MB = 100


def _encode_option(value: Any) -> str:
    """Strings are sent as-is, everything else as its JSON text.

    Values JSON cannot express (TOML dates and times) are sent as their ``str()``.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


class ProcessingApiClient:
    """ProcessingAPI driver using httpx.AsyncClient.

    Parameters
    ----------
    base_url : str
        API root; tool endpoints are ``<base_url>/<tool>``.
    auth_token : str | None
        Bearer token. Anonymous requests are sent without ``Authorization``.
    timeout : float
        Per-request timeout in seconds (default: 300.0).
    poll_interval : float
        Seconds to sleep between status polls (default: 2.0).
    max_poll_attempts : int
        Number of status polls before giving up with :class:`JobTimeoutError`.
    session_id : str | None
        Value of ``X-Session-ID``; a fresh uuid4 per client by default.

    Examples
    --------
    Basic usage::

        api = ProcessingApiClient(auth_token="secret")
        job_uuid = await api.aupload(Path("report.pdf"), "compress", {"quality": "low"})
        await api.apoll_job(job_uuid)
        await api.adownload(job_uuid, Path("Processed/report_compress.pdf"))
        await api.aclose()
    """

    def __init__(
        self,
        base_url: str = "https://pdf.dk/api",
        auth_token: str | None = None,
        timeout: float = 300.0,
        poll_interval: float = 2.0,
        max_poll_attempts: int = 300,
        session_id: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts
        self.session_id = session_id or str(uuid.uuid4())
        self._client: httpx.AsyncClient | None = None
        # Hook for testing: inject a custom transport
        self._transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_config(cls, config: ApiConfig, auth_token: str | None = None) -> ProcessingApiClient:
        """Build a client from the ``[api]`` configuration section."""
        return cls(
            base_url=config.base_url,
            auth_token=auth_token,
            timeout=config.request_timeout,
            poll_interval=config.poll_interval,
            max_poll_attempts=config.max_poll_attempts,
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily create the httpx client on first use."""
        if self._client is None:
            kwargs: dict[str, Any] = {
                "base_url": self._base_url,
                "timeout": self._timeout,
                "follow_redirects": True,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    def _headers(self, accept: str = _JSON) -> dict[str, str]:
        headers = {"X-Session-ID": self.session_id, "Accept": accept}
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport failures to :class:`NetworkError`."""
        client = self._get_client()
        try:
            return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(str(e) or type(e).__name__) from e

    def _parse_body(self, response: httpx.Response, what: str) -> dict[str, Any]:
        """Parse a JSON envelope, raising :class:`ServerError` on anything else."""
        try:
            body = response.json()
        except ValueError as e:
            raise ServerError(
                f"Failed to parse {what} response: {e} - Body: {response.text}"
            ) from e
        if not isinstance(body, dict):
            raise ServerError(f"Failed to parse {what} response: expected an object")
        return body

    @staticmethod
    def _failure_message(body: dict[str, Any]) -> str:
        return str(body.get("error") or body.get("message") or "Unknown error")

    # ------------------------------------------------------------------
    # ProcessingAPI protocol
    # ------------------------------------------------------------------

    async def aupload(self, file_path: Path, tool: str, options: dict[str, Any]) -> str:
        """Upload ``file_path`` to ``POST /<tool>`` and return the remote job handle.

        Raises
        ------
        UnauthorizedError
            HTTP 401
        FileTooLargeError
            HTTP 413
        JobLimitExceededError
            HTTP 429
        ServerError
            Any other non-2xx status, an unparseable body, ``success: false``
            or a missing job handle
        LocalIOError
            If the input file cannot be read
        """
        file_name = file_path.name or "file.pdf"
        logger.info("Uploading file: {} for tool: {}", file_name, tool)

        try:
            file_bytes = await asyncio.to_thread(file_path.read_bytes)
        except OSError as e:
            raise LocalIOError(str(file_path), str(e)) from e

        data = {key: _encode_option(value) for key, value in options.items()}
        files = {"file": (file_name, file_bytes, "application/pdf")}

        response = await self._send(
            "POST", f"/{tool}", headers=self._headers(), data=data, files=files
        )
        status = response.status_code

        if status == 401:
            raise UnauthorizedError()
        if status == 429:
            raise JobLimitExceededError()
        if status == 413:
            raise FileTooLargeError(DEFAULT_MAX_FILE_SIZE_MB)

        logger.debug("Upload response {}: {}", status, response.text)
        if not response.is_success:
            raise ServerError(f"Server returned {status}: {response.text}")

        body = self._parse_body(response, "upload")
        if not body.get("success"):
            raise ServerError(self._failure_message(body))

        payload = body.get("data") or {}
        job_uuid = payload.get("jobUuid") or payload.get("job_uuid")
        if not job_uuid:
            raise ServerError("No job UUID returned from server")
        return str(job_uuid)

    async def aget_job(self, job_uuid: str) -> JobStatusData | None:
        """Fetch ``GET /jobs/<uuid>`` once.

        Returns
        -------
        JobStatusData | None
            None when the server answered ``success: true`` without data.
        """
        response = await self._send("GET", f"/jobs/{job_uuid}", headers=self._headers())
        if response.status_code == 401:
            raise UnauthorizedError()

        body = self._parse_body(response, "poll")
        if not body.get("success"):
            message = str(body.get("error") or body.get("message") or "")
            if "unauthorized" in message.lower():
                raise UnauthorizedError()
            raise ServerError(message)

        payload = body.get("data")
        if not payload:
            return None
        try:
            return JobStatusData.model_validate(payload)
        except pydantic.ValidationError as e:
            raise ServerError(f"Failed to parse poll response: {e}") from e

    async def apoll_job(self, job_uuid: str) -> JobStatusData:
        """Poll until the remote job completes, fails or the attempt ceiling is hit."""
        for attempt in range(1, self._max_poll_attempts + 1):
            logger.debug("Polling job {} (attempt {})", job_uuid, attempt)
            job = await self.aget_job(job_uuid)

            if job is not None:
                remote = RemoteJobStatus.parse(job.status)
                if isinstance(remote, Completed):
                    logger.info("Job {} completed", job_uuid)
                    return job
                if isinstance(remote, Failed):
                    raise JobFailedError(job.error or "Unknown error")
                logger.debug("Job {} status: {}, waiting...", job_uuid, remote)

            await asyncio.sleep(self._poll_interval)

        raise JobTimeoutError(self._max_poll_attempts)

    async def adownload(self, job_uuid: str, output_path: Path) -> int:
        """Download the result of ``job_uuid`` into ``output_path``.

        Parent directories are created. Returns the number of bytes written.
        """
        logger.info("Downloading result to: {}", output_path)
        response = await self._send(
            "GET", f"/jobs/{job_uuid}/download", headers=self._headers(accept=_BINARY)
        )
        if response.status_code == 401:
            raise UnauthorizedError()
        if not response.is_success:
            raise ServerError(f"Download failed: {response.text}")

        content = response.content
        try:
            await asyncio.to_thread(_write_bytes, output_path, content)
        except OSError as e:
            raise LocalIOError(str(output_path), str(e)) from e

        logger.info("Downloaded {} bytes to {}", len(content), output_path)
        return len(content)

    async def aget_usage_status(self) -> UsageStatus:
        """Fetch ``GET /settings/usage-status`` for the current token."""
        response = await self._send("GET", "/settings/usage-status", headers=self._headers())
        if response.status_code == 401:
            raise UnauthorizedError()

        body = self._parse_body(response, "usage")
        if not body.get("success"):
            raise ServerError(str(body.get("message") or "Unknown error"))

        payload = body.get("data")
        if not payload:
            raise ServerError("No usage data returned")
        try:
            return UsageStatus.model_validate(payload)
        except pydantic.ValidationError as e:
            raise ServerError(f"Failed to parse usage response: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ProcessingApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def _write_bytes(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
