"""Observer manager drivers."""

from pdfwatch.drivers.observer_manager.local import (
    LocalObserverManager,
    LoggingErrorHandler,
    LoggingObserver,
    NullObserverManager,
    ObserverFailure,
)

__all__ = [
    "LocalObserverManager",
    "LoggingErrorHandler",
    "LoggingObserver",
    "NullObserverManager",
    "ObserverFailure",
]
