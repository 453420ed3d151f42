"""Debounce raw filesystem notifications into one FileReadyEvent per file.

A file is *pending* from its latest create/modify notification until it has
been quiet for ``debounce_seconds``. A quiet file is promoted only when it
still exists and opens for reading; a file the writer still holds open stays
pending and is retried on the next tick.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Callable
from pathlib import Path

from pdfwatch.drivers.observer_manager.local import NullObserverManager
from pdfwatch.kernel.domain.folders import FileReadyEvent
from pdfwatch.kernel.events import FileIgnored, FileReady, WatchStarted
from pdfwatch.kernel.logging import get_logger
from pdfwatch.kernel.ports.observer_manager import ObserverManager
from pdfwatch.watcher.broadcast import Broadcast
from pdfwatch.watcher.filters import EventKind, RawEvent, is_candidate
from pdfwatch.watcher.registry import FolderRegistry

logger = get_logger(__name__)

Clock = Callable[[], float]
ReadableProbe = Callable[[Path], bool]

DEFAULT_DEBOUNCE_SECONDS = 2.0
DEFAULT_SCAN_INTERVAL = 0.5


def is_readable(path: Path) -> bool:
    """Whether ``path`` can be opened for reading right now."""
    try:
        with path.open("rb"):
            return True
    except OSError:
        return False


class Stabilizer:
    """Owns the pending map; run it as exactly one task."""

    def __init__(
        self,
        registry: FolderRegistry,
        broadcast: Broadcast[FileReadyEvent],
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        scan_interval: float = DEFAULT_SCAN_INTERVAL,
        clock: Clock = time.monotonic,
        probe: ReadableProbe = is_readable,
        observer_manager: ObserverManager | None = None,
    ) -> None:
        self._registry = registry
        self._broadcast = broadcast
        self._debounce = debounce_seconds
        self._scan_interval = scan_interval
        self._clock = clock
        self._probe = probe
        self._observers = observer_manager or NullObserverManager()
        self.pending: dict[Path, float] = {}

    def handle_event(self, event: RawEvent, now: float | None = None) -> int:
        """Record candidate paths from one notification; returns how many were taken."""
        if event.kind not in (EventKind.CREATE, EventKind.MODIFY):
            return 0

        stamp = self._clock() if now is None else now
        accepted = 0
        for raw_path in event.paths:
            if not isinstance(raw_path, (str, os.PathLike)):
                logger.warning("Skipping malformed notification entry: {!r}", raw_path)
                continue
            path = Path(raw_path)
            if not is_candidate(path):
                continue
            self.pending[path] = stamp
            accepted += 1
        return accepted

    async def scan(self, now: float | None = None) -> list[FileReadyEvent]:
        """Promote every pending file that is quiet, present and readable."""
        current = self._clock() if now is None else now
        ready: list[FileReadyEvent] = []

        for path, stamp in list(self.pending.items()):
            if current - stamp < self._debounce:
                continue
            if not path.is_file():
                del self.pending[path]
                continue
            if not self._probe(path):
                logger.debug("File not yet readable, keeping pending: {}", path)
                continue

            del self.pending[path]
            event = await self._promote(path)
            if event is not None:
                ready.append(event)

        return ready

    async def _promote(self, path: Path) -> FileReadyEvent | None:
        folder = self._registry.resolve(path)
        if folder is None:
            logger.debug("No watched folder matches {}, ignoring", path)
            await self._observers.notify(FileIgnored(path=str(path)))
            return None

        event = FileReadyEvent.for_folder(path, folder)
        logger.info("File ready: {} (tool: {})", path, event.tool_id)
        self._broadcast.publish(event)
        await self._observers.notify(FileReady(path=str(path), tool_id=event.tool_id))
        return event

    async def run(self, queue: asyncio.Queue[RawEvent]) -> None:
        """Consume notifications and scan every ``scan_interval`` until cancelled.

        The wait on the queue is bounded by the time left until the next tick,
        so a steady stream of notifications never postpones a scan.
        """
        await self._observers.notify(
            WatchStarted(debounce_seconds=self._debounce, scan_interval=self._scan_interval)
        )
        next_tick = self._clock() + self._scan_interval

        while True:
            remaining = next_tick - self._clock()
            if remaining > 0:
                try:
                    raw = await asyncio.wait_for(queue.get(), timeout=remaining)
                except TimeoutError:
                    pass
                else:
                    self.handle_event(raw)

            now = self._clock()
            if now < next_tick:
                continue
            try:
                await self.scan(now)
            except Exception as e:
                logger.opt(exception=e).error("Scan failed, watcher keeps running: {}", e)
            next_tick = now + self._scan_interval
