"""Persistent store for the aggregate progress record."""

from __future__ import annotations

import json
import logging
from collections.abc import Hashable
from typing import Any

from pydantic import ValidationError

from pyprogress._constants import STORAGE_KEY
from pyprogress._preview import preview_for_log
from pyprogress.exceptions import CorruptRecordError, PersistenceError
from pyprogress.models.record import AggregateRecord
from pyprogress.state.merge import normalize
from pyprogress.storage.backends import StorageBackend

_logger = logging.getLogger(__name__)


def encode_record(record: AggregateRecord) -> str:
    """Serialize *record* to its persisted JSON form."""
    return json.dumps(record.to_storage(), ensure_ascii=False, separators=(",", ":"))


def decode_record(payload: str) -> AggregateRecord:
    """Parse a persisted payload.

    Missing or invalid fields fall back to their defaults one by one and
    unknown fields are ignored.  The derived totals and the level are
    then brought back in line with the per-activity entries.

    Raises
    ------
    CorruptRecordError
        If *payload* is not a JSON object at all.
    """
    try:
        data: Any = json.loads(payload)
    except (TypeError, ValueError, RecursionError) as exc:
        raise CorruptRecordError(f"Stored record is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CorruptRecordError(f"Stored record is a JSON {type(data).__name__}, expected an object")
    try:
        record = AggregateRecord.model_validate(data)
    except ValidationError as exc:
        raise CorruptRecordError(f"Stored record failed validation: {exc}") from exc

    healed = normalize(record)
    if healed is not record:
        _logger.debug(
            "Healed stored record: level %d->%d experience %d->%d stars %d->%d",
            record.level,
            healed.level,
            record.experience,
            healed.experience,
            record.total_stars,
            healed.total_stars,
        )
    return healed


class RecordStore:
    """Reads and writes the single aggregate record kept under *key*.

    :meth:`read` never fails: an empty slot yields the default record
    and an unreadable one is logged and replaced by the default.
    :meth:`write` raises :class:`PersistenceError` and leaves the previous
    value in place when the backend cannot store the new one.
    """

    def __init__(self, backend: StorageBackend, *, key: str = STORAGE_KEY) -> None:
        self._backend = backend
        self._key = key
        self._own_revision: Hashable | None = None

    @property
    def key(self) -> str:
        return self._key

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def own_revision(self) -> Hashable | None:
        """Revision produced by this store's most recent successful write."""
        return self._own_revision

    def revision(self) -> Hashable | None:
        return self._backend.revision(self._key)

    def read(self) -> AggregateRecord:
        try:
            payload = self._backend.get(self._key)
        except OSError:
            _logger.warning("Could not read stored record %r; using defaults", self._key, exc_info=True)
            return AggregateRecord.default()
        if payload is None:
            return AggregateRecord.default()
        try:
            return decode_record(payload)
        except CorruptRecordError as exc:
            _logger.warning(
                "Discarding corrupt record %r (%s): %s",
                self._key,
                exc,
                preview_for_log(payload),
            )
            return AggregateRecord.default()

    def write(self, record: AggregateRecord) -> None:
        payload = encode_record(record)
        try:
            self._backend.set(self._key, payload)
        except PersistenceError:
            raise
        except OSError as exc:
            raise PersistenceError(f"Failed to store {self._key!r}: {exc}", key=self._key) from exc
        self._own_revision = self._backend.revision(self._key)
        _logger.debug("Stored record %r (%d bytes)", self._key, len(payload))
