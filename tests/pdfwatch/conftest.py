"""Shared fixtures for pdfwatch tests.

- fake_api: in-memory ProcessingAPI with scripted failures
- observed_events: LocalObserverManager plus the list of events it received
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from pdfwatch.drivers.observer_manager.local import LocalObserverManager
from pdfwatch.kernel.events import Event
from pdfwatch.kernel.ports.processing_api import JobStatusData, UsageStatus


class FakeProcessingAPI:
    """ProcessingAPI double that records calls and writes a fixed result."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.result = b"%PDF-1.7 processed"
        self.fail_on: dict[str, Exception] = {}
        self.closed = False

    async def aupload(self, file_path: Path, tool: str, options: dict[str, Any]) -> str:
        self.calls.append(("upload", (file_path, tool, dict(options))))
        if "upload" in self.fail_on:
            raise self.fail_on["upload"]
        return "remote-1"

    async def aget_job(self, job_uuid: str) -> JobStatusData | None:
        return JobStatusData(uuid=job_uuid, status="completed")

    async def apoll_job(self, job_uuid: str) -> JobStatusData:
        self.calls.append(("poll", job_uuid))
        if "poll" in self.fail_on:
            raise self.fail_on["poll"]
        return JobStatusData(uuid=job_uuid, status="completed")

    async def adownload(self, job_uuid: str, output_path: Path) -> int:
        self.calls.append(("download", (job_uuid, output_path)))
        if "download" in self.fail_on:
            raise self.fail_on["download"]
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.result)
        return len(self.result)

    async def aget_usage_status(self) -> UsageStatus:
        return UsageStatus(plan="pro", limit=100, used=7)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_api() -> FakeProcessingAPI:
    return FakeProcessingAPI()


@pytest_asyncio.fixture
async def observed_events():
    """Yield ``(manager, events)``; every notified event is appended to ``events``."""
    events: list[Event] = []

    async def record(event: Event) -> None:
        events.append(event)

    manager = LocalObserverManager()
    manager.register(record, observer_id="recorder")
    yield manager, events
    await manager.close()
