"""In-process ObserverManager used by the watcher, the pipeline and the CLI.

Every observer is called with its own timeout under a shared concurrency
limit. A failing or hanging observer is reported to an error handler; the
watcher and the pipeline never see the exception.
"""

from __future__ import annotations

import asyncio
import inspect
import uuid
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from pdfwatch.kernel.events import ArchiveFailed, Event, JobFailed
from pdfwatch.kernel.logging import get_logger

if TYPE_CHECKING:
    from pdfwatch.kernel.ports.observer_manager import (
        AsyncObserverFunc,
        Observer,
        ObserverFunc,
    )

logger = get_logger(__name__)

DEFAULT_MAX_CONCURRENT_OBSERVERS = 10
DEFAULT_OBSERVER_TIMEOUT = 5.0
DEFAULT_MAX_SYNC_WORKERS = 4

# An observer choking on one of these is logged with a traceback
PRIORITY_EVENT_TYPES: tuple[type[Event], ...] = (JobFailed, ArchiveFailed)


@dataclass(frozen=True, slots=True)
class ObserverFailure:
    """Where an observer error happened."""

    observer_id: str
    observer_name: str
    event_type: str
    is_critical: bool


class ErrorHandler(Protocol):
    """Receives errors raised (or timeouts hit) by observers."""

    def handle_error(self, error: Exception, failure: ObserverFailure) -> None: ...


class LoggingErrorHandler:
    """Default error handler: warning for routine events, traceback for failures."""

    def handle_error(self, error: Exception, failure: ObserverFailure) -> None:
        if failure.is_critical:
            logger.opt(exception=error).error(
                "Observer {} failed on {}: {}", failure.observer_name, failure.event_type, error
            )
        else:
            logger.warning(
                "Observer {} failed on {}: {}", failure.observer_name, failure.event_type, error
            )


class _CallableObserver:
    """Adapts a plain function to the Observer protocol.

    Coroutine functions are awaited; sync functions run on the manager's
    thread pool so a slow observer cannot stall the watcher loop.
    """

    def __init__(self, func: ObserverFunc | AsyncObserverFunc, executor: ThreadPoolExecutor):
        self._func = func
        self._executor = executor
        self._is_async = inspect.iscoroutinefunction(func)
        self.__name__ = getattr(func, "__name__", type(func).__name__)

    async def handle(self, event: Event) -> None:
        if self._is_async:
            await self._func(event)
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._func, event)


@dataclass(slots=True)
class _Registration:
    observer: Observer
    event_types: tuple[type[Event], ...] | None
    timeout: float

    @property
    def name(self) -> str:
        return getattr(self.observer, "__name__", type(self.observer).__name__)

    def accepts(self, event: Event) -> bool:
        return self.event_types is None or isinstance(event, self.event_types)


def _event_type_filter(
    event_types: Iterable[type[Event]] | type[Event] | None,
) -> tuple[type[Event], ...] | None:
    if event_types is None:
        return None
    types = (event_types,) if isinstance(event_types, type) else tuple(event_types)
    for event_type in types:
        if not (isinstance(event_type, type) and issubclass(event_type, Event)):
            raise TypeError(f"event_types must be Event subclasses, got {event_type!r}")
    return types


class LocalObserverManager:
    """Dispatches events to registered observers inside the current process.

    Parameters
    ----------
    max_concurrent_observers : int
        Observers running at the same time across all notifications
    observer_timeout : float
        Default per-observer timeout in seconds
    max_sync_workers : int
        Thread pool size for sync function observers
    error_handler : ErrorHandler | None
        Receives observer failures; logs them when None
    """

    def __init__(
        self,
        max_concurrent_observers: int = DEFAULT_MAX_CONCURRENT_OBSERVERS,
        observer_timeout: float = DEFAULT_OBSERVER_TIMEOUT,
        max_sync_workers: int = DEFAULT_MAX_SYNC_WORKERS,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self._default_timeout = observer_timeout
        self._error_handler = error_handler or LoggingErrorHandler()
        self._limit = asyncio.Semaphore(max_concurrent_observers)
        self._executor = ThreadPoolExecutor(
            max_workers=max_sync_workers, thread_name_prefix="pdfwatch-observer"
        )
        self._closed = False
        self._registrations: dict[str, _Registration] = {}

    def register(
        self,
        handler: Observer | ObserverFunc | AsyncObserverFunc,
        *,
        observer_id: str | None = None,
        event_types: Iterable[type[Event]] | type[Event] | None = None,
        timeout: float | None = None,
    ) -> str:
        """Register ``handler`` and return its id.

        Raises
        ------
        ValueError
            If the id is taken or ``timeout`` is not positive
        TypeError
            If ``handler`` is neither an Observer nor callable, or
            ``event_types`` holds something other than Event subclasses
        """
        key = observer_id or str(uuid.uuid4())
        if key in self._registrations:
            raise ValueError(f"Observer '{key}' already registered")
        if timeout is not None and timeout <= 0:
            raise ValueError(f"Observer timeout must be positive, got {timeout}")

        observer: Observer
        if hasattr(handler, "handle"):
            observer = handler  # type: ignore[assignment]
        elif callable(handler):
            observer = _CallableObserver(handler, self._executor)
        else:
            raise TypeError(f"Observer must be callable or have handle(), got {type(handler)}")

        self._registrations[key] = _Registration(
            observer=observer,
            event_types=_event_type_filter(event_types),
            timeout=timeout or self._default_timeout,
        )
        return key

    def unregister(self, handler_id: str) -> bool:
        return self._registrations.pop(handler_id, None) is not None

    async def notify(self, event: Event) -> None:
        """Deliver ``event`` to every observer that accepts it; never raises."""
        targets = [(key, reg) for key, reg in self._registrations.items() if reg.accepts(event)]
        if targets:
            await asyncio.gather(*(self._deliver(key, reg, event) for key, reg in targets))

    def clear(self) -> None:
        self._registrations.clear()

    async def close(self) -> None:
        """Drop all observers and shut the sync worker pool down."""
        self.clear()
        if not self._closed:
            self._closed = True
            self._executor.shutdown(wait=True)

    def __len__(self) -> int:
        return len(self._registrations)

    async def __aenter__(self) -> LocalObserverManager:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _deliver(self, key: str, registration: _Registration, event: Event) -> None:
        async with self._limit:
            try:
                await asyncio.wait_for(registration.observer.handle(event), registration.timeout)
            except Exception as e:
                failure = ObserverFailure(
                    observer_id=key,
                    observer_name=registration.name,
                    event_type=type(event).__name__,
                    is_critical=isinstance(event, PRIORITY_EVENT_TYPES),
                )
                self._error_handler.handle_error(e, failure)


class NullObserverManager:
    """Drops every event; used when no observer manager is injected."""

    def register(
        self,
        handler: Observer | ObserverFunc | AsyncObserverFunc,
        *,
        observer_id: str | None = None,
        event_types: Iterable[type[Event]] | type[Event] | None = None,
        timeout: float | None = None,
    ) -> str:
        raise TypeError("NullObserverManager does not accept observers")

    def unregister(self, handler_id: str) -> bool:
        return False

    async def notify(self, event: Event) -> None:
        return None

    def clear(self) -> None:
        return None

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return 0


class LoggingObserver:
    """Writes each event's ``log_message()`` to the log."""

    __name__ = "LoggingObserver"

    async def handle(self, event: Event) -> None:
        message = event.log_message()
        if isinstance(event, JobFailed):
            logger.error(message)
        elif isinstance(event, ArchiveFailed):
            logger.warning(message)
        else:
            logger.info(message)
