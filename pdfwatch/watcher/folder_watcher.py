"""Folder watcher facade.

Wires the watchdog bridge, the folder registry, the stabilizer task and the
FileReadyEvent broadcast together behind a small async API::

    async with FolderWatcher(config.watcher) as watcher:
        receiver = watcher.subscribe()
        await watcher.add_folder(tool_config)
        async for event in receiver:
            ...
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from pathlib import Path
from typing import Any

from pdfwatch.drivers.observer_manager.local import NullObserverManager
from pdfwatch.kernel.config.models import WatcherConfig
from pdfwatch.kernel.domain.folders import FileReadyEvent, ToolConfig, WatchedFolder
from pdfwatch.kernel.events import FolderAdded, FolderRemoved
from pdfwatch.kernel.exceptions import WatcherError
from pdfwatch.kernel.logging import get_logger
from pdfwatch.kernel.ports.observer_manager import ObserverManager
from pdfwatch.watcher.bridge import NotificationBridge, WatchdogBackend
from pdfwatch.watcher.broadcast import Broadcast, Receiver
from pdfwatch.watcher.filters import RawEvent
from pdfwatch.watcher.registry import FolderRegistry, WatchBackend
from pdfwatch.watcher.stabilizer import Clock, ReadableProbe, Stabilizer, is_readable

logger = get_logger(__name__)


class FolderWatcher:
    """Watches folders for new PDFs and broadcasts one FileReadyEvent per file.

    Parameters
    ----------
    config : WatcherConfig | None
        Debounce, scan interval and channel sizes (defaults when None).
    observer_manager : ObserverManager | None
        Receives FolderAdded/FolderRemoved/FileReady/FileIgnored events.
    backend : WatchBackend | None
        Notification source. By default a watchdog observer is started; pass
        a custom backend and feed notifications with :meth:`submit` instead.
    clock, probe
        Monotonic clock and readability check used by the stabilizer.
    """

    def __init__(
        self,
        config: WatcherConfig | None = None,
        *,
        observer_manager: ObserverManager | None = None,
        backend: WatchBackend | None = None,
        clock: Clock = time.monotonic,
        probe: ReadableProbe = is_readable,
    ) -> None:
        self._config = config or WatcherConfig()
        self._observers = observer_manager or NullObserverManager()
        self._custom_backend = backend
        self._clock = clock
        self._probe = probe

        self._broadcast: Broadcast[FileReadyEvent] = Broadcast(self._config.broadcast_capacity)
        self._queue: asyncio.Queue[RawEvent] | None = None
        self._watchdog: WatchdogBackend | None = None
        self._registry: FolderRegistry | None = None
        self._stabilizer: Stabilizer | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stabilizer(self) -> Stabilizer | None:
        return self._stabilizer

    async def start(self) -> None:
        """Start the notification backend and the stabilizer task.

        Raises
        ------
        WatcherError
            If the watcher is already running
        """
        if self._task is not None:
            raise WatcherError("Watcher already started")

        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._config.queue_size)

        backend: WatchBackend
        if self._custom_backend is not None:
            backend = self._custom_backend
        else:
            self._watchdog = WatchdogBackend(NotificationBridge(loop, self._queue))
            self._watchdog.start()
            backend = self._watchdog

        self._registry = FolderRegistry(backend)
        self._stabilizer = Stabilizer(
            self._registry,
            self._broadcast,
            debounce_seconds=self._config.debounce_seconds,
            scan_interval=self._config.scan_interval,
            clock=self._clock,
            probe=self._probe,
            observer_manager=self._observers,
        )
        self._task = asyncio.create_task(self._stabilizer.run(self._queue), name="pdfwatch-stabilizer")
        logger.info("File watcher started")

    def _require_registry(self) -> FolderRegistry:
        if self._registry is None:
            raise WatcherError("Watcher not started")
        return self._registry

    async def add_folder(self, config: ToolConfig) -> WatchedFolder | None:
        """Watch ``config.folder_path`` for ``config.id`` (no-op when disabled)."""
        registry = self._require_registry()
        entry = await asyncio.to_thread(registry.add, config)
        if entry is not None:
            await self._observers.notify(FolderAdded(folder=str(entry.path), tool_id=entry.tool_id))
        return entry

    async def remove_folder(self, folder: str | Path) -> bool:
        registry = self._require_registry()
        removed = await asyncio.to_thread(registry.remove, folder)
        if removed:
            await self._observers.notify(FolderRemoved(folder=str(folder)))
        return removed

    def folders(self) -> list[WatchedFolder]:
        return [] if self._registry is None else self._registry.folders()

    def subscribe(self) -> Receiver[FileReadyEvent]:
        """New independent receiver of FileReadyEvents."""
        return self._broadcast.subscribe()

    def submit(self, event: RawEvent) -> bool:
        """Queue a notification from a custom backend; False when dropped."""
        if self._queue is None:
            raise WatcherError("Watcher not started")
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Notification queue full, dropping event for {}", event.paths)
            return False
        return True

    async def stop(self) -> None:
        """Stop watching and close the broadcast; receivers drain then end."""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        if self._watchdog is not None:
            await asyncio.to_thread(self._watchdog.stop)
            self._watchdog = None
        if self._registry is not None:
            self._registry.clear()
        self._broadcast.close()
        logger.info("File watcher stopped")

    async def __aenter__(self) -> FolderWatcher:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()
