"""Reporting facade: the one entry point activity modules call."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyprogress._constants import DEFAULT_TOTAL_ACTIVITIES
from pyprogress.config import ProgressConfig
from pyprogress.models.record import AggregateRecord
from pyprogress.models.result import ActivityResult
from pyprogress.models.summary import ProgressSummary, RewardPreview
from pyprogress.rewards import preview_rewards, summarize
from pyprogress.state.merge import fold_with_outcome
from pyprogress.state.notifier import ChangeCallback, ChangeNotifier, Subscription
from pyprogress.state.watcher import StoreWatcher
from pyprogress.storage.backends import FileBackend, MemoryBackend, StorageBackend
from pyprogress.storage.record_store import RecordStore

_logger = logging.getLogger(__name__)


def _build_backend(config: ProgressConfig) -> StorageBackend:
    if config.storage_dir is None:
        return MemoryBackend()
    return FileBackend(config.storage_dir)


class ProgressReporter:
    """Merge activity results into the persistent aggregate record.

    Usage::

        reporter = ProgressReporter.from_config(ProgressConfig.from_env())
        with reporter.subscribe(dashboard.refresh):
            record = reporter.report("safety-quest", {"completed": True, "score": 50, "stars": 2})

    :meth:`report` runs read, fold, write and publish synchronously
    without yielding, so two reports in the same process can never
    interleave.  Keep it that way: making the write asynchronous would
    require serializing reports again.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        notifier: ChangeNotifier | None = None,
        total_activities: int = DEFAULT_TOTAL_ACTIVITIES,
        poll_interval: float = 1.0,
    ) -> None:
        self._store = store
        self._notifier = notifier if notifier is not None else ChangeNotifier()
        self._total_activities = total_activities
        self._poll_interval = poll_interval

    @classmethod
    def from_config(cls, config: ProgressConfig) -> ProgressReporter:
        store = RecordStore(_build_backend(config), key=config.storage_key)
        return cls(store, total_activities=config.total_activities, poll_interval=config.poll_interval)

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    # ------------------------------------------------------------------
    # Producer interface
    # ------------------------------------------------------------------

    def report(self, activity_id: str, result: ActivityResult | Mapping[str, Any]) -> AggregateRecord:
        """Merge *result* for *activity_id* and return the new record.

        Malformed result fields are coerced, never rejected.

        Raises
        ------
        ValueError
            If *activity_id* is empty.
        PersistenceError
            If the new record could not be stored.  Subscribers are not
            notified and the previously stored record is unchanged.
        """
        if not isinstance(activity_id, str) or not activity_id.strip():
            raise ValueError("activity_id must be a non-empty string")
        activity_id = activity_id.strip()
        validated = ActivityResult.coerce(dict(result) if isinstance(result, Mapping) else result)
        if validated.activity_id is not None and validated.activity_id != activity_id:
            _logger.debug(
                "Result carries activity_id=%r, reporting it under %r",
                validated.activity_id,
                activity_id,
            )

        outcome = fold_with_outcome(self._store.read(), activity_id, validated)
        self._store.write(outcome.record)

        _logger.debug(
            "Applied %s: score=%d stars=%d +%d xp",
            activity_id,
            validated.score,
            validated.stars,
            outcome.experience_gained,
        )
        if outcome.leveled_up:
            _logger.debug("Level up: %d (+%d)", outcome.record.level, outcome.levels_gained)

        self._notifier.publish()
        return outcome.record

    # ------------------------------------------------------------------
    # Observer interface
    # ------------------------------------------------------------------

    def read(self) -> AggregateRecord:
        return self._store.read()

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        return self._notifier.subscribe(callback)

    def watcher(self, *, poll_interval: float | None = None) -> StoreWatcher:
        """Build a watcher that relays changes made by other contexts."""
        interval = self._poll_interval if poll_interval is None else poll_interval
        return StoreWatcher(self._store, self._notifier, poll_interval=interval)

    def summary(self) -> ProgressSummary:
        return summarize(self._store.read(), self._total_activities)

    def preview_rewards(self, activity_id: str, score: int) -> RewardPreview:
        return preview_rewards(self._store.read(), activity_id, score)
