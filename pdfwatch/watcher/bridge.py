"""Bridge from watchdog's observer thread into the asyncio event loop.

watchdog calls handlers on its own thread. The handler below converts each
notification into a :class:`RawEvent` and hands it to the loop with
``call_soon_threadsafe``; the loop side puts it into a bounded queue and
drops it (with a warning) when the queue is full, so the OS thread never
blocks.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from pdfwatch.kernel.exceptions import WatcherError
from pdfwatch.kernel.logging import get_logger
from pdfwatch.watcher.filters import EventKind, RawEvent

logger = get_logger(__name__)


def to_raw_event(event: FileSystemEvent) -> RawEvent:
    """Map a watchdog event onto the create / modify / other kinds.

    A rename into the folder is reported as a modification of both paths,
    which covers browsers that download to ``x.pdf.part`` then rename.
    """
    if isinstance(event, FileCreatedEvent):
        return RawEvent(EventKind.CREATE, (event.src_path,))
    if isinstance(event, FileMovedEvent):
        return RawEvent(EventKind.MODIFY, (event.src_path, event.dest_path))
    if isinstance(event, FileModifiedEvent):
        return RawEvent(EventKind.MODIFY, (event.src_path,))
    return RawEvent(EventKind.OTHER, (event.src_path,))


class NotificationBridge(FileSystemEventHandler):
    """watchdog handler feeding a bounded asyncio queue owned by ``loop``."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[RawEvent]) -> None:
        super().__init__()
        self._loop = loop
        self._queue = queue
        self.dropped = 0

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        raw = to_raw_event(event)
        try:
            self._loop.call_soon_threadsafe(self._enqueue, raw)
        except RuntimeError:
            # Loop already closed during shutdown
            logger.debug("Event loop closed, dropping notification for {}", raw.paths)

    def _enqueue(self, raw: RawEvent) -> None:
        try:
            self._queue.put_nowait(raw)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Notification queue full, dropping event for {}", raw.paths)


class WatchdogBackend:
    """Watch backend built on a watchdog :class:`Observer` (non-recursive)."""

    def __init__(self, handler: FileSystemEventHandler, observer: BaseObserver | None = None) -> None:
        self._handler = handler
        self._observer = observer if observer is not None else Observer()
        self._watches: dict[Path, ObservedWatch] = {}
        self._lock = threading.Lock()

    def start(self) -> None:
        if not self._observer.is_alive():
            self._observer.start()

    def stop(self) -> None:
        with self._lock:
            self._watches.clear()
        if self._observer.is_alive():
            self._observer.stop()
            self._observer.join(timeout=5)

    def watch(self, folder: Path) -> None:
        with self._lock:
            if folder in self._watches:
                return
            try:
                self._watches[folder] = self._observer.schedule(
                    self._handler, str(folder), recursive=False
                )
            except OSError as e:
                raise WatcherError(f"Failed to watch {folder}: {e}") from e

    def unwatch(self, folder: Path) -> None:
        with self._lock:
            watch = self._watches.pop(folder, None)
        if watch is None:
            return
        try:
            self._observer.unschedule(watch)
        except KeyError:
            logger.debug("Folder {} was not scheduled", folder)
