from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from pyprogress import ProgressConfig, ProgressReporter
from pyprogress.exceptions import PersistenceError, StorageQuotaExceededError
from pyprogress.models import ActivityEntry, ActivityResult, AggregateRecord
from pyprogress.storage.backends import FileBackend, MemoryBackend
from pyprogress.storage.record_store import RecordStore

KEY = "gameProgress"


class _FailingBackend(MemoryBackend):
    """Memory backend whose writes can be switched off."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise PersistenceError("storage unavailable", key=key)
        super().set(key, value)


def _reporter(backend: MemoryBackend | None = None) -> ProgressReporter:
    return ProgressReporter(RecordStore(backend if backend is not None else MemoryBackend()))


def _counter(reporter: ProgressReporter) -> list[int]:
    calls: list[int] = []
    reporter.subscribe(lambda: calls.append(1))
    return calls


def test_safety_quest_end_to_end() -> None:
    reporter = _reporter()

    record = reporter.report(
        "safety-quest",
        {"completed": True, "score": 50, "stars": 2, "badges": ["Safety Expert"]},
    )

    assert record.level == 1
    assert record.experience == 5
    assert record.total_stars == 2
    assert record.total_badges == {"Safety Expert"}
    assert record.per_activity == {
        "safety-quest": ActivityEntry(completed=True, score=50, stars=2, badges=frozenset({"Safety Expert"})),
    }
    assert reporter.read() == record


def test_report_accepts_activity_result_instances() -> None:
    reporter = _reporter()
    record = reporter.report("memory", ActivityResult(completed=True, score=300, stars=3))
    assert record.experience == 30
    assert record.total_stars == 3


def test_producer_input_is_sanitized() -> None:
    reporter = _reporter()
    payload: dict[str, Any] = {
        "completed": 1,
        "score": "-75",
        "stars": 12,
        "badges": ["Hero", "Hero", None, "  "],
        "confetti": True,
    }

    record = reporter.report("roleplay", payload)

    entry = record.per_activity["roleplay"]
    assert entry == ActivityEntry(completed=True, score=0, stars=3, badges=frozenset({"Hero"}))
    assert record.total_stars == 3
    assert payload["stars"] == 12


def test_generator_badges_are_recorded() -> None:
    record = _reporter().report("a", {"badges": (b for b in ["Hero"])})
    assert record.total_badges == {"Hero"}


def test_huge_score_is_stored_exactly() -> None:
    reporter = _reporter()
    reporter.report("a", {"score": 10**25 + 990})
    reporter.report("b", {"score": 10**400})

    record = reporter.read()
    assert record.per_activity["a"].score == 10**25 + 990
    assert record.per_activity["b"].score == 10**400


def test_activity_id_is_trimmed_and_required() -> None:
    reporter = _reporter()
    record = reporter.report("  quiz ", {"score": 10})
    assert list(record.per_activity) == ["quiz"]

    with pytest.raises(ValueError):
        reporter.report("   ", {"score": 10})
    with pytest.raises(ValueError):
        reporter.report("", {"score": 10})


def test_explicit_activity_id_wins_over_payload() -> None:
    reporter = _reporter()
    record = reporter.report("map-hunt", {"activityId": "something-else", "stars": 1})
    assert list(record.per_activity) == ["map-hunt"]


def test_rereport_overwrites_entry() -> None:
    reporter = _reporter()
    reporter.report("a", {"stars": 1})
    record = reporter.report("a", {"stars": 3})

    assert record.per_activity["a"].stars == 3
    assert record.total_stars == 3


def test_identical_rereport_keeps_totals() -> None:
    reporter = _reporter()
    result = {"completed": True, "score": 60, "stars": 2, "badges": ["Navigator"]}

    once = reporter.report("map-hunt", result)
    twice = reporter.report("map-hunt", result)

    assert twice.total_stars == once.total_stars
    assert twice.total_badges == once.total_badges


def test_sequential_reports_keep_invariants() -> None:
    reporter = _reporter()
    reports = [
        ("quiz", {"score": 1000, "stars": 3, "badges": ["Expert"]}),
        ("memory", {"score": 45, "stars": 1}),
        ("quiz", {"score": 999, "stars": 2, "badges": ["Advanced"]}),
        ("relax", {"score": 12345, "stars": 5, "badges": ["Calm"]}),
    ]
    for activity_id, result in reports:
        record = reporter.report(activity_id, result)
        assert 0 <= record.experience < 100
        assert record.total_stars == sum(e.stars for e in record.per_activity.values())
        assert record.total_badges == frozenset().union(*(e.badges for e in record.per_activity.values()))

    final = reporter.read()
    # 100 + 4 + 99 + 1234 xp
    assert final.level == 15
    assert final.experience == 37
    assert final.total_stars == 2 + 1 + 3


def test_each_successful_report_notifies_once() -> None:
    reporter = _reporter()
    calls = _counter(reporter)

    reporter.report("a", {"score": 10})
    reporter.report("b", {"score": 10})

    assert calls == [1, 1]


def test_unsubscribed_observer_is_not_notified() -> None:
    reporter = _reporter()
    calls: list[int] = []
    subscription = reporter.subscribe(lambda: calls.append(1))

    reporter.report("a", {"score": 10})
    subscription.unsubscribe()
    reporter.report("b", {"score": 10})

    assert calls == [1]


def test_observer_rereads_record_on_notification() -> None:
    reporter = _reporter()
    seen: list[int] = []
    reporter.subscribe(lambda: seen.append(reporter.read().total_stars))

    reporter.report("a", {"stars": 2})
    reporter.report("b", {"stars": 1})

    assert seen == [2, 3]


def test_failed_write_raises_and_does_not_notify() -> None:
    backend = _FailingBackend()
    reporter = _reporter(backend)
    calls = _counter(reporter)
    before = reporter.report("a", {"score": 500, "stars": 2})

    backend.fail = True
    with pytest.raises(PersistenceError):
        reporter.report("b", {"score": 500, "stars": 3})

    assert calls == [1]
    assert reporter.read() == before


def test_quota_exhaustion_is_surfaced() -> None:
    reporter = _reporter(MemoryBackend(quota_bytes=250))
    calls = _counter(reporter)

    with pytest.raises(StorageQuotaExceededError):
        reporter.report("a", {"badges": ["b" * 500]})

    assert calls == []
    assert reporter.read() == AggregateRecord.default()


def test_corrupt_store_recovers_on_next_report() -> None:
    backend = MemoryBackend()
    backend.set(KEY, "<<<not json>>>")
    reporter = _reporter(backend)

    assert reporter.read() == AggregateRecord.default()
    record = reporter.report("quiz", {"score": 50, "stars": 2})

    assert record.experience == 5
    assert reporter.read() == record


def test_two_contexts_on_one_backend_do_not_lose_updates() -> None:
    backend = MemoryBackend()
    first = _reporter(backend)
    second = _reporter(backend)

    first.report("a", {"stars": 1, "score": 100})
    second.report("b", {"stars": 2, "score": 100})
    first.report("c", {"stars": 3, "score": 100})

    record = first.read()
    assert sorted(record.per_activity) == ["a", "b", "c"]
    assert record.total_stars == 6
    assert record.experience == 30
    assert second.read() == record


def test_summary_and_reward_preview() -> None:
    reporter = ProgressReporter(RecordStore(MemoryBackend()), total_activities=4)
    reporter.report("a", {"completed": True, "stars": 3, "badges": ["Expert"]})

    summary = reporter.summary()
    assert summary.completed_activities == 1
    assert summary.total_activities == 4
    assert summary.completion_percentage == 25
    assert summary.badge_count == 1

    assert reporter.preview_rewards("a", 85).first_time is False
    fresh = reporter.preview_rewards("b", 85)
    assert fresh.first_time is True
    assert fresh.stars == 3
    assert fresh.badges == {"Advanced", "First Timer"}


class TestFromConfig:
    def test_memory_backend_without_storage_dir(self) -> None:
        reporter = ProgressReporter.from_config(ProgressConfig())
        assert isinstance(reporter.store.backend, MemoryBackend)
        assert reporter.store.key == KEY

    def test_file_backend_survives_restart(self, tmp_path: Path) -> None:
        config = ProgressConfig(storage_dir=tmp_path, storage_key="progress", total_activities=2)
        reporter = ProgressReporter.from_config(config)
        reporter.report("a", {"completed": True, "score": 250, "stars": 2})

        restarted = ProgressReporter.from_config(config)

        assert isinstance(restarted.store.backend, FileBackend)
        assert (tmp_path / "progress.json").exists()
        assert restarted.read().experience == 25
        assert restarted.summary().completion_percentage == 50

    def test_watcher_uses_configured_interval(self) -> None:
        reporter = ProgressReporter.from_config(ProgressConfig(poll_interval=0.25))
        assert reporter.watcher()._poll_interval == 0.25  # noqa: SLF001
        assert reporter.watcher(poll_interval=2.0)._poll_interval == 2.0  # noqa: SLF001
