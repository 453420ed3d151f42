"""Tests for the FolderWatcher facade and the watchdog bridge."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from pdfwatch.kernel.config import WatcherConfig
from pdfwatch.kernel.domain.folders import ToolConfig
from pdfwatch.kernel.events import FolderAdded, FolderRemoved
from pdfwatch.kernel.exceptions import WatcherError
from pdfwatch.watcher.bridge import NotificationBridge, to_raw_event
from pdfwatch.watcher.filters import EventKind, RawEvent
from pdfwatch.watcher.folder_watcher import FolderWatcher

FAST = WatcherConfig(debounce_seconds=0.05, scan_interval=0.01, queue_size=10)


class RecordingBackend:
    def __init__(self) -> None:
        self.watched: list[Path] = []
        self.unwatched: list[Path] = []

    def watch(self, folder: Path) -> None:
        self.watched.append(folder)

    def unwatch(self, folder: Path) -> None:
        self.unwatched.append(folder)


class TestFolderWatcher:
    @pytest.mark.asyncio
    async def test_end_to_end_with_custom_backend(self, tmp_path: Path, observed_events) -> None:
        manager, events = observed_events
        backend = RecordingBackend()
        folder = tmp_path / "Word"

        async with FolderWatcher(FAST, observer_manager=manager, backend=backend) as watcher:
            receiver = watcher.subscribe()
            entry = await watcher.add_folder(ToolConfig(id="pdf-to-word", folder_path=str(folder)))
            assert entry is not None
            assert backend.watched == [folder]

            pdf = folder / "letter.pdf"
            pdf.write_bytes(b"%PDF")
            assert watcher.submit(RawEvent.of(EventKind.CREATE, pdf))

            event = await asyncio.wait_for(receiver.recv(), timeout=2)
            assert event.path == pdf
            assert event.tool_id == "pdf-to-word"

            assert await watcher.remove_folder(folder) is True
            assert watcher.folders() == []

        assert not watcher.running
        assert any(isinstance(e, FolderAdded) for e in events)
        assert any(isinstance(e, FolderRemoved) for e in events)

    @pytest.mark.asyncio
    async def test_stop_closes_receivers(self, tmp_path: Path) -> None:
        watcher = FolderWatcher(FAST, backend=RecordingBackend())
        receiver = watcher.subscribe()
        await watcher.start()
        await watcher.stop()
        assert [e async for e in receiver] == []

    @pytest.mark.asyncio
    async def test_requires_start(self, tmp_path: Path) -> None:
        watcher = FolderWatcher(FAST, backend=RecordingBackend())
        with pytest.raises(WatcherError, match="not started"):
            await watcher.add_folder(ToolConfig(id="ocr", folder_path=str(tmp_path)))

    @pytest.mark.asyncio
    async def test_double_start(self) -> None:
        async with FolderWatcher(FAST, backend=RecordingBackend()) as watcher:
            with pytest.raises(WatcherError, match="already started"):
                await watcher.start()

    @pytest.mark.asyncio
    async def test_submit_drops_when_queue_full(self) -> None:
        config = WatcherConfig(debounce_seconds=10, scan_interval=10, queue_size=1)
        async with FolderWatcher(config, backend=RecordingBackend()) as watcher:
            # The stabilizer task has not run yet, so nothing is consumed
            assert watcher.submit(RawEvent.of(EventKind.CREATE, "/a.pdf")) is True
            assert watcher.submit(RawEvent.of(EventKind.CREATE, "/b.pdf")) is False


class TestBridge:
    def test_event_mapping(self) -> None:
        assert to_raw_event(FileCreatedEvent("/in/a.pdf")) == RawEvent(EventKind.CREATE, ("/in/a.pdf",))
        assert to_raw_event(FileModifiedEvent("/in/a.pdf")).kind is EventKind.MODIFY
        moved = to_raw_event(FileMovedEvent("/in/a.pdf.part", "/in/a.pdf"))
        assert moved == RawEvent(EventKind.MODIFY, ("/in/a.pdf.part", "/in/a.pdf"))
        assert to_raw_event(FileDeletedEvent("/in/a.pdf")).kind is EventKind.OTHER

    @pytest.mark.asyncio
    async def test_bridge_enqueues_from_another_thread(self) -> None:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[RawEvent] = asyncio.Queue(maxsize=1)
        bridge = NotificationBridge(loop, queue)

        await asyncio.to_thread(bridge.dispatch, FileCreatedEvent("/in/a.pdf"))
        await asyncio.to_thread(bridge.dispatch, FileCreatedEvent("/in/b.pdf"))
        await asyncio.to_thread(bridge.dispatch, DirCreatedEvent("/in/sub"))
        await asyncio.sleep(0)

        assert queue.qsize() == 1
        assert (await queue.get()).paths == ("/in/a.pdf",)
        assert bridge.dropped == 1
