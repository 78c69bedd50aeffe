"""Cross-context change signaling.

Views living in other processes (or on another :class:`RecordStore`
sharing the same backend) write the record without going through this
process's :class:`ChangeNotifier`.  :class:`StoreWatcher` bridges that
gap by polling the backend revision and publishing locally whenever
someone else changed the record.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Hashable
from typing import Any

from pyprogress.state.notifier import ChangeNotifier
from pyprogress.storage.record_store import RecordStore

_logger = logging.getLogger(__name__)


class StoreWatcher:
    """Publish on *notifier* when the stored record changes elsewhere.

    Usage::

        async with StoreWatcher(store, notifier, poll_interval=1.0):
            await serve_views()
    """

    def __init__(self, store: RecordStore, notifier: ChangeNotifier, *, poll_interval: float = 1.0) -> None:
        self._store = store
        self._notifier = notifier
        self._poll_interval = poll_interval
        self._last_seen: Hashable | None = store.revision()
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def check(self) -> bool:
        """Poll once; return ``True`` if an external change was published."""
        current = self._store.revision()
        if current == self._last_seen:
            return False
        self._last_seen = current
        if current is not None and current == self._store.own_revision:
            # Our own write; the reporter has already published it.
            return False
        _logger.debug("Record %r changed in another context", self._store.key)
        self._notifier.publish()
        return True

    async def run(self) -> None:
        """Poll until cancelled."""
        while True:
            try:
                self.check()
            except OSError:
                _logger.debug("Revision check for %r failed", self._store.key, exc_info=True)
            await asyncio.sleep(self._poll_interval)

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self.run())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> StoreWatcher:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
