"""Fan ready files out to independent pipeline runs.

The dispatcher consumes a broadcast receiver and starts one task per
FileReadyEvent. Each run builds its own API client from the token that is
current at that moment, so a re-login takes effect for the next file.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable

from pdfwatch.drivers.observer_manager.local import NullObserverManager
from pdfwatch.kernel.domain.folders import FileReadyEvent
from pdfwatch.kernel.domain.jobs import Job
from pdfwatch.kernel.logging import get_logger
from pdfwatch.kernel.ports.observer_manager import ObserverManager
from pdfwatch.kernel.ports.processing_api import ProcessingAPI
from pdfwatch.pipeline.processor import FileProcessor
from pdfwatch.watcher.broadcast import Receiver

logger = get_logger(__name__)

TokenProvider = Callable[[], str | None]
ApiFactory = Callable[[str | None], ProcessingAPI]


class PipelineDispatcher:
    """Spawns one pipeline task per ready file and tracks them until done."""

    def __init__(
        self,
        receiver: Receiver[FileReadyEvent],
        api_factory: ApiFactory,
        token_provider: TokenProvider = lambda: None,
        observer_manager: ObserverManager | None = None,
    ) -> None:
        self._receiver = receiver
        self._api_factory = api_factory
        self._token_provider = token_provider
        self._observers = observer_manager or NullObserverManager()
        self._tasks: set[asyncio.Task[Job]] = set()
        self._consumer: asyncio.Task[None] | None = None
        self._closing = False

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def start(self) -> None:
        if self._consumer is None:
            self._consumer = asyncio.create_task(self.run(), name="pdfwatch-dispatcher")

    async def run(self) -> None:
        """Consume events until the receiver closes or :meth:`aclose` is called."""
        async for event in self._receiver:
            if self._closing:
                break
            self.dispatch(event)

    def dispatch(self, event: FileReadyEvent) -> asyncio.Task[Job]:
        task = asyncio.create_task(self._process(event), name=f"pdfwatch-job:{event.path.name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _process(self, event: FileReadyEvent) -> Job:
        api = self._api_factory(self._token_provider())
        try:
            return await FileProcessor(api, self._observers).process(event)
        except Exception as e:
            logger.opt(exception=e).error("Unexpected error processing {}: {}", event.path, e)
            raise
        finally:
            await api.aclose()

    async def aclose(self, wait: bool = True) -> None:
        """Stop taking new events; in-flight runs are never cancelled.

        With ``wait`` the call returns once every in-flight run finished.
        """
        self._closing = True
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None
        if wait and self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
