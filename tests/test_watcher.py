from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pyprogress import ProgressReporter
from pyprogress.state.notifier import ChangeNotifier
from pyprogress.state.watcher import StoreWatcher
from pyprogress.storage.backends import FileBackend, MemoryBackend
from pyprogress.storage.record_store import RecordStore


def test_no_change_means_no_publish() -> None:
    store = RecordStore(MemoryBackend())
    notifier = ChangeNotifier()
    calls: list[int] = []
    notifier.subscribe(lambda: calls.append(1))

    watcher = StoreWatcher(store, notifier)

    assert watcher.check() is False
    assert calls == []


def test_write_from_other_context_is_published_once() -> None:
    backend = MemoryBackend()
    local = ProgressReporter(RecordStore(backend))
    other = ProgressReporter(RecordStore(backend))
    watcher = local.watcher()
    seen: list[int] = []
    local.subscribe(lambda: seen.append(local.read().total_stars))

    other.report("memory", {"stars": 2})

    assert watcher.check() is True
    assert watcher.check() is False
    assert seen == [2]


def test_own_writes_are_not_published_twice() -> None:
    reporter = ProgressReporter(RecordStore(MemoryBackend()))
    watcher = reporter.watcher()
    calls: list[int] = []
    reporter.subscribe(lambda: calls.append(1))

    reporter.report("quiz", {"score": 10})

    assert watcher.check() is False
    assert calls == [1]


def test_external_write_after_own_write_is_published() -> None:
    backend = MemoryBackend()
    local = ProgressReporter(RecordStore(backend))
    other = ProgressReporter(RecordStore(backend))
    watcher = local.watcher()
    calls: list[int] = []
    local.subscribe(lambda: calls.append(1))

    local.report("a", {"score": 10})
    other.report("b", {"score": 10})

    assert watcher.check() is True
    assert calls == [1, 1]


def test_file_backend_processes_share_changes(tmp_path: Path) -> None:
    writer = ProgressReporter(RecordStore(FileBackend(tmp_path)))
    viewer = ProgressReporter(RecordStore(FileBackend(tmp_path)))
    watcher = viewer.watcher()
    levels: list[int] = []
    viewer.subscribe(lambda: levels.append(viewer.read().level))

    writer.report("roleplay", {"score": 2000})

    assert watcher.check() is True
    assert levels == [3]


@pytest.mark.asyncio
async def test_background_watcher_relays_changes() -> None:
    backend = MemoryBackend()
    local = ProgressReporter(RecordStore(backend))
    other = ProgressReporter(RecordStore(backend))
    changed = asyncio.Event()
    local.subscribe(changed.set)

    async with local.watcher(poll_interval=0.01) as watcher:
        assert watcher.is_running
        other.report("relax", {"completed": True, "stars": 1})
        await asyncio.wait_for(changed.wait(), timeout=2.0)

    assert not watcher.is_running
    assert local.read().per_activity["relax"].completed is True


@pytest.mark.asyncio
async def test_stop_is_safe_without_start() -> None:
    watcher = StoreWatcher(RecordStore(MemoryBackend()), ChangeNotifier())
    await watcher.stop()
    assert not watcher.is_running


@pytest.mark.asyncio
async def test_start_twice_keeps_one_task() -> None:
    watcher = StoreWatcher(RecordStore(MemoryBackend()), ChangeNotifier(), poll_interval=0.01)
    watcher.start()
    task = watcher._task  # noqa: SLF001
    watcher.start()

    assert watcher._task is task  # noqa: SLF001
    await watcher.stop()
    assert task is not None and task.cancelled()
