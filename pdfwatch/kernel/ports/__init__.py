"""Port interfaces for the application."""

from pdfwatch.kernel.ports.observer_manager import (
    AsyncObserverFunc,
    Observer,
    ObserverFunc,
    ObserverManager,
)
from pdfwatch.kernel.ports.processing_api import JobStatusData, ProcessingAPI, UsageStatus

__all__ = [
    "AsyncObserverFunc",
    "Observer",
    "ObserverFunc",
    "ObserverManager",
    "JobStatusData",
    "ProcessingAPI",
    "UsageStatus",
]
