"""In-process change notification.

Observers subscribe a zero-argument callback and re-read the record
when it fires.  The notifier carries no payload: the record itself is
always fetched from the store, so a late observer can never act on a
stale snapshot handed to it by someone else.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from typing import Any

_logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]


class Subscription:
    """Handle returned by :meth:`ChangeNotifier.subscribe`.

    Calling :meth:`unsubscribe` more than once is harmless.  The handle
    is also a context manager, so a view can scope its subscription::

        with reporter.subscribe(view.refresh):
            run_view()
    """

    def __init__(self, notifier: ChangeNotifier, callback: ChangeCallback) -> None:
        self._notifier = notifier
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def callback(self) -> ChangeCallback:
        return self._callback

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._notifier._remove(self)  # noqa: SLF001

    def __call__(self) -> None:
        self.unsubscribe()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.unsubscribe()


class ChangeNotifier:
    """Broadcast "record changed" to every current subscriber.

    Each :meth:`publish` dispatches to a snapshot of the subscribers
    taken when the call starts.  Callbacks registered while a dispatch
    is running are not guaranteed to see that publish; callbacks removed
    while it is running are skipped.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with contextlib.suppress(ValueError):
            self._subscriptions.remove(subscription)

    def publish(self) -> None:
        """Invoke every subscriber registered before this call."""
        for subscription in tuple(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.callback()
            except Exception:
                # One broken observer must not starve the others.
                _logger.debug("Change subscriber %r failed", subscription.callback, exc_info=True)
