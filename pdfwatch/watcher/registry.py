"""Folder registry and path resolver.

Maps watched folders to their tool configuration and answers "which tool owns
this file?" with a longest-prefix match over path components, so a file in
``/a/b/x.pdf`` belongs to ``/a/b`` even when ``/a`` is watched too.

The registry is shared between the control surface (adding and removing
folders) and the stabilizer task (resolving paths), so every access goes
through one lock.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol

from pdfwatch.kernel.domain.folders import ToolConfig, WatchedFolder
from pdfwatch.kernel.exceptions import WatcherError
from pdfwatch.kernel.logging import get_logger

logger = get_logger(__name__)

PROCESSED_DIR_NAME = "Processed"


class WatchBackend(Protocol):
    """What the registry needs from the OS notification layer."""

    def watch(self, folder: Path) -> None:
        """Start non-recursive notifications for ``folder``."""
        ...

    def unwatch(self, folder: Path) -> None:
        """Stop notifications for ``folder``; unknown folders are ignored."""
        ...


def normalize_path(path: str | Path) -> Path:
    """Absolute, user-expanded form used as the registry key."""
    return Path(path).expanduser().absolute()


class FolderRegistry:
    """Thread-safe set of watched folders keyed by absolute path."""

    def __init__(self, backend: WatchBackend | None = None) -> None:
        self._backend = backend
        self._folders: dict[Path, WatchedFolder] = {}
        self._lock = threading.Lock()

    def add(self, config: ToolConfig) -> WatchedFolder | None:
        """Watch ``config.folder_path`` for ``config.id``.

        Disabled tools and tools without a folder are a no-op (returns None).
        The folder and its ``Processed`` subfolder are created when missing.
        Re-adding a folder replaces its configuration.

        Raises
        ------
        WatcherError
            If the folder cannot be created or the backend refuses to watch it
        """
        if not config.enabled or not config.folder_path:
            logger.debug("Tool '{}' is disabled or has no folder, not watching", config.id)
            return None

        folder = normalize_path(config.folder_path)
        try:
            (folder / PROCESSED_DIR_NAME).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WatcherError(f"Cannot create {folder}: {e}") from e

        entry = WatchedFolder(path=folder, config=config.snapshot())
        with self._lock:
            if self._backend is not None and folder not in self._folders:
                try:
                    self._backend.watch(folder)
                except OSError as e:
                    raise WatcherError(f"Cannot watch {folder}: {e}") from e
            self._folders[folder] = entry

        logger.info("Watching folder: {} for tool: {}", folder, config.id)
        return entry

    def remove(self, folder: str | Path) -> bool:
        """Stop watching ``folder``; True if it was registered."""
        key = normalize_path(folder)
        with self._lock:
            entry = self._folders.pop(key, None)
            if entry is None:
                return False
            if self._backend is not None:
                self._backend.unwatch(key)

        logger.info("Stopped watching folder: {}", key)
        return True

    def resolve(self, path: str | Path) -> WatchedFolder | None:
        """Return the deepest registered folder containing ``path``, or None."""
        candidate = normalize_path(path)
        best: WatchedFolder | None = None
        with self._lock:
            for folder, entry in self._folders.items():
                if not candidate.is_relative_to(folder):
                    continue
                if best is None or len(folder.parts) > len(best.path.parts):
                    best = entry
        return best

    def folders(self) -> list[WatchedFolder]:
        """Snapshot of the registered folders."""
        with self._lock:
            return list(self._folders.values())

    def clear(self) -> None:
        """Unwatch and forget every folder."""
        with self._lock:
            keys = list(self._folders)
            self._folders.clear()
            if self._backend is not None:
                for key in keys:
                    self._backend.unwatch(key)

    def __contains__(self, folder: object) -> bool:
        if not isinstance(folder, (str, Path)):
            return False
        key = normalize_path(folder)
        with self._lock:
            return key in self._folders

    def __len__(self) -> int:
        with self._lock:
            return len(self._folders)
