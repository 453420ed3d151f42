"""Observer Manager Port - interface for reporting watcher and pipeline events.

Key guarantees every implementation must keep:
- Observers are read-only and cannot affect processing
- Observer failures never crash the watcher or a pipeline run
- Event type filtering per observer
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Protocol, runtime_checkable

from pdfwatch.kernel.events import Event

# Type aliases for observer functions
ObserverFunc = Callable[[Event], None]
AsyncObserverFunc = Callable[[Event], Any]  # Returns awaitable


@runtime_checkable
class Observer(Protocol):
    """Protocol for observers that monitor events."""

    async def handle(self, event: Event) -> None:
        """Handle an event (read-only, no return value)."""
        ...


@runtime_checkable
class ObserverManager(Protocol):
    """Port interface for event observation."""

    def register(
        self,
        handler: Observer | ObserverFunc | AsyncObserverFunc,
        *,
        observer_id: str | None = None,
        event_types: Iterable[type[Event]] | type[Event] | None = None,
        timeout: float | None = None,
    ) -> str:
        """Register an observer with optional event type filtering.

        Args
        ----
            handler: Either an Observer protocol implementation or
                    a function (sync/async) that takes an event
            observer_id: Optional ID for the observer
            event_types: Event type or collection of types to observe (None = all events)
            timeout: Optional timeout override for this observer

        Returns
        -------
            str: The ID of the registered observer
        """
        ...

    def unregister(self, handler_id: str) -> bool:
        """Unregister an observer by ID; True if it was registered."""
        ...

    async def notify(self, event: Event) -> None:
        """Notify all interested observers of an event."""
        ...

    def clear(self) -> None:
        """Remove all registered observers."""
        ...

    async def close(self) -> None:
        """Close the manager and cleanup resources."""
        ...

    def __len__(self) -> int:
        """Return number of registered observers."""
        ...
