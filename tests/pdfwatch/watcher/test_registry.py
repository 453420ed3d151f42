"""Tests for FolderRegistry."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from pdfwatch.kernel.domain.folders import ToolConfig
from pdfwatch.kernel.exceptions import WatcherError
from pdfwatch.watcher.registry import FolderRegistry


class RecordingBackend:
    def __init__(self, fail: bool = False) -> None:
        self.watched: list[Path] = []
        self.unwatched: list[Path] = []
        self._fail = fail

    def watch(self, folder: Path) -> None:
        if self._fail:
            raise PermissionError("denied")
        self.watched.append(folder)

    def unwatch(self, folder: Path) -> None:
        self.unwatched.append(folder)


def _tool(tool_id: str, folder: Path | None, **kwargs: object) -> ToolConfig:
    return ToolConfig(id=tool_id, folder_path=str(folder) if folder else None, **kwargs)


class TestAdd:
    def test_creates_folder_and_processed(self, tmp_path: Path) -> None:
        backend = RecordingBackend()
        registry = FolderRegistry(backend)
        folder = tmp_path / "Compress"

        entry = registry.add(_tool("compress", folder))

        assert entry is not None
        assert entry.tool_id == "compress"
        assert (folder / "Processed").is_dir()
        assert backend.watched == [folder]
        assert folder in registry
        assert len(registry) == 1

    def test_disabled_or_folderless_is_noop(self, tmp_path: Path) -> None:
        backend = RecordingBackend()
        registry = FolderRegistry(backend)

        assert registry.add(_tool("ocr", tmp_path / "Ocr", enabled=False)) is None
        assert registry.add(_tool("rotate", None)) is None

        assert backend.watched == []
        assert len(registry) == 0
        assert not (tmp_path / "Ocr").exists()

    def test_readd_overwrites_config_without_rewatching(self, tmp_path: Path) -> None:
        backend = RecordingBackend()
        registry = FolderRegistry(backend)
        folder = tmp_path / "Shared"

        registry.add(_tool("compress", folder))
        registry.add(_tool("ocr", folder))

        assert backend.watched == [folder]
        resolved = registry.resolve(folder / "a.pdf")
        assert resolved is not None
        assert resolved.tool_id == "ocr"

    def test_backend_failure(self, tmp_path: Path) -> None:
        registry = FolderRegistry(RecordingBackend(fail=True))
        with pytest.raises(WatcherError, match="Cannot watch"):
            registry.add(_tool("compress", tmp_path / "Compress"))
        assert len(registry) == 0

    def test_config_is_snapshotted(self, tmp_path: Path) -> None:
        registry = FolderRegistry()
        config = _tool("rotate", tmp_path / "Rotate", options={"angle": 90})
        registry.add(config)
        config.options["angle"] = 270

        resolved = registry.resolve(tmp_path / "Rotate" / "a.pdf")
        assert resolved is not None
        assert resolved.config.options == {"angle": 90}


class TestRemove:
    def test_remove(self, tmp_path: Path) -> None:
        backend = RecordingBackend()
        registry = FolderRegistry(backend)
        folder = tmp_path / "Compress"
        registry.add(_tool("compress", folder))

        assert registry.remove(folder) is True
        assert backend.unwatched == [folder]
        assert registry.resolve(folder / "a.pdf") is None

    def test_remove_unknown_is_noop(self, tmp_path: Path) -> None:
        backend = RecordingBackend()
        registry = FolderRegistry(backend)
        assert registry.remove(tmp_path / "nothing") is False
        assert backend.unwatched == []


class TestResolve:
    def test_longest_prefix_wins(self, tmp_path: Path) -> None:
        registry = FolderRegistry()
        outer = tmp_path / "a"
        inner = outer / "b"
        registry.add(_tool("compress", outer))
        registry.add(_tool("ocr", inner))

        deep = registry.resolve(inner / "x.pdf")
        shallow = registry.resolve(outer / "y.pdf")

        assert deep is not None and deep.tool_id == "ocr"
        assert shallow is not None and shallow.tool_id == "compress"

    def test_prefix_is_component_aware(self, tmp_path: Path) -> None:
        registry = FolderRegistry()
        registry.add(_tool("compress", tmp_path / "a"))
        assert registry.resolve(tmp_path / "ab" / "x.pdf") is None

    def test_no_match(self, tmp_path: Path) -> None:
        registry = FolderRegistry()
        registry.add(_tool("compress", tmp_path / "a"))
        assert registry.resolve(Path("/somewhere/else.pdf")) is None

    def test_concurrent_add_and_resolve(self, tmp_path: Path) -> None:
        registry = FolderRegistry()
        errors: list[BaseException] = []

        def adder() -> None:
            try:
                for i in range(20):
                    registry.add(_tool("compress", tmp_path / f"f{i}"))
            except BaseException as e:
                errors.append(e)

        def resolver() -> None:
            try:
                for _ in range(200):
                    registry.resolve(tmp_path / "f1" / "x.pdf")
            except BaseException as e:
                errors.append(e)

        threads = [threading.Thread(target=adder), threading.Thread(target=resolver)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(registry.folders()) == 20


def test_clear_unwatches_everything(tmp_path: Path) -> None:
    backend = RecordingBackend()
    registry = FolderRegistry(backend)
    registry.add(_tool("compress", tmp_path / "a"))
    registry.add(_tool("ocr", tmp_path / "b"))

    registry.clear()

    assert sorted(backend.unwatched) == sorted([tmp_path / "a", tmp_path / "b"])
    assert len(registry) == 0
