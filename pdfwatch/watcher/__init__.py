"""Folder watching: OS notifications to debounced FileReadyEvents."""

from pdfwatch.watcher.broadcast import Broadcast, ChannelClosed, Receiver
from pdfwatch.watcher.filters import EventKind, RawEvent, is_candidate
from pdfwatch.watcher.folder_watcher import FolderWatcher
from pdfwatch.watcher.registry import FolderRegistry, WatchBackend
from pdfwatch.watcher.stabilizer import Stabilizer, is_readable

__all__ = [
    "Broadcast",
    "ChannelClosed",
    "EventKind",
    "FolderRegistry",
    "FolderWatcher",
    "RawEvent",
    "Receiver",
    "Stabilizer",
    "WatchBackend",
    "is_candidate",
    "is_readable",
]
