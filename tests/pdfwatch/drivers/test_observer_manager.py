"""Tests for LocalObserverManager."""

from __future__ import annotations

import asyncio

import pytest

from pdfwatch.drivers.observer_manager.local import (
    LocalObserverManager,
    LoggingObserver,
    NullObserverManager,
    ObserverFailure,
)
from pdfwatch.kernel.events import Event, FileIgnored, FileReady, JobFailed
from pdfwatch.kernel.exceptions import ServerError
from pdfwatch.kernel.ports.observer_manager import ObserverManager


class RecordingErrorHandler:
    def __init__(self) -> None:
        self.errors: list[tuple[Exception, ObserverFailure]] = []

    def handle_error(self, error: Exception, failure: ObserverFailure) -> None:
        self.errors.append((error, failure))


class CollectingObserver:
    def __init__(self) -> None:
        self.events: list[Event] = []

    async def handle(self, event: Event) -> None:
        self.events.append(event)


def test_protocol_conformance() -> None:
    assert isinstance(LocalObserverManager(), ObserverManager)
    assert isinstance(NullObserverManager(), ObserverManager)


class TestRegistration:
    @pytest.mark.asyncio
    async def test_register_and_unregister(self) -> None:
        async with LocalObserverManager() as manager:
            observer_id = manager.register(CollectingObserver())
            assert len(manager) == 1
            assert manager.unregister(observer_id) is True
            assert manager.unregister(observer_id) is False
            assert len(manager) == 0

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self) -> None:
        async with LocalObserverManager() as manager:
            manager.register(CollectingObserver(), observer_id="a")
            with pytest.raises(ValueError, match="already registered"):
                manager.register(CollectingObserver(), observer_id="a")

    @pytest.mark.asyncio
    async def test_invalid_event_types(self) -> None:
        async with LocalObserverManager() as manager:
            with pytest.raises(TypeError):
                manager.register(CollectingObserver(), event_types=[str])  # type: ignore[list-item]


class TestNotify:
    @pytest.mark.asyncio
    async def test_event_type_filtering(self) -> None:
        async with LocalObserverManager() as manager:
            everything = CollectingObserver()
            only_ready = CollectingObserver()
            manager.register(everything)
            manager.register(only_ready, event_types=FileReady)

            await manager.notify(FileReady(path="/in/a.pdf", tool_id="compress"))
            await manager.notify(FileIgnored(path="/elsewhere/b.pdf"))

            assert len(everything.events) == 2
            assert [type(e) for e in only_ready.events] == [FileReady]

    @pytest.mark.asyncio
    async def test_sync_function_observer(self) -> None:
        seen: list[Event] = []
        async with LocalObserverManager() as manager:
            manager.register(seen.append)
            await manager.notify(FileIgnored(path="/x.pdf"))
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_failing_observer_is_isolated(self) -> None:
        handler = RecordingErrorHandler()
        good = CollectingObserver()

        async def broken(event: Event) -> None:
            raise RuntimeError("observer bug")

        async with LocalObserverManager(error_handler=handler) as manager:
            manager.register(broken)
            manager.register(good)
            await manager.notify(FileReady(path="/in/a.pdf", tool_id="ocr"))

        assert len(good.events) == 1
        assert len(handler.errors) == 1
        error, failure = handler.errors[0]
        assert str(error) == "observer bug"
        assert failure.event_type == "FileReady"
        assert failure.observer_name == "broken"
        assert failure.is_critical is False

    @pytest.mark.asyncio
    async def test_failures_are_critical_for_job_failures(self) -> None:
        handler = RecordingErrorHandler()

        def broken(event: Event) -> None:
            raise RuntimeError("observer bug")

        async with LocalObserverManager(error_handler=handler) as manager:
            manager.register(broken)
            await manager.notify(JobFailed(job_id="j", path="/a.pdf", error=ServerError("x")))

        assert handler.errors[0][1].is_critical is True

    @pytest.mark.asyncio
    async def test_slow_observer_times_out(self) -> None:
        handler = RecordingErrorHandler()

        async def slow(event: Event) -> None:
            await asyncio.sleep(10)

        async with LocalObserverManager(error_handler=handler) as manager:
            manager.register(slow, timeout=0.05)
            await manager.notify(FileIgnored(path="/x.pdf"))

        assert len(handler.errors) == 1
        assert isinstance(handler.errors[0][0], TimeoutError)

    @pytest.mark.asyncio
    async def test_logging_observer_accepts_every_event(self) -> None:
        async with LocalObserverManager() as manager:
            manager.register(LoggingObserver())
            await manager.notify(JobFailed(job_id="j", path="/a.pdf", error=ServerError("x")))
            await manager.notify(FileReady(path="/a.pdf", tool_id="ocr"))


class TestNullObserverManager:
    @pytest.mark.asyncio
    async def test_drops_events(self) -> None:
        manager = NullObserverManager()
        await manager.notify(FileIgnored(path="/x.pdf"))
        assert len(manager) == 0
        with pytest.raises(TypeError):
            manager.register(CollectingObserver())
