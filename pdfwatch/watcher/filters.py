"""Raw notification model and the candidate filter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

# Folders the pipeline itself writes into; files there must never be re-processed
EXCLUDED_DIR_NAMES = frozenset({"processed", "originals"})
TEMP_SUFFIXES = (".tmp", ".part")


class EventKind(StrEnum):
    """Coarse kind of an OS notification."""

    CREATE = "create"
    MODIFY = "modify"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class RawEvent:
    """One OS notification as handed over by the watch backend.

    ``paths`` is whatever the backend supplied; the stabilizer skips entries
    that are not path-like.
    """

    kind: EventKind
    paths: tuple[object, ...]

    @classmethod
    def of(cls, kind: EventKind, *paths: str | Path) -> RawEvent:
        return cls(kind=kind, paths=tuple(paths))


def is_candidate(path: Path) -> bool:
    """Whether ``path`` looks like a user-dropped PDF worth debouncing.

    Rejects non-PDF extensions, anything under a ``Processed`` or
    ``Originals`` folder (case-insensitive), hidden files and partial
    downloads.
    """
    if path.suffix.lower() != ".pdf":
        return False

    if any(part.lower() in EXCLUDED_DIR_NAMES for part in path.parts):
        return False

    name = path.name
    if name.startswith("."):
        return False
    return not name.endswith(TEMP_SUFFIXES)
