"""Aggregate progress record and per-activity entries."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, ClassVar

from pydantic import AfterValidator, BeforeValidator, Field, PlainSerializer

from pyprogress._constants import MIN_LEVEL
from pyprogress._preview import preview_for_log
from pyprogress.models._base import BadgeSet, Flag, Level, NonNegativeInt, ProgressBaseModel

_logger = logging.getLogger(__name__)


class ActivityEntry(ProgressBaseModel):
    """Latest stored outcome for one activity.

    Star ratings are not clamped here; the reporting boundary clamps
    producer input before it ever becomes an entry.
    """

    completed: Flag = False
    score: NonNegativeInt = 0
    stars: NonNegativeInt = 0
    badges: BadgeSet = Field(default_factory=frozenset)


def _coerce_entries(value: Any) -> dict[str, Any]:
    """Keep the well-formed entries of a stored per-activity mapping."""
    if not isinstance(value, Mapping):
        if value is not None:
            _logger.warning("Ignoring non-mapping per-activity data: %s", preview_for_log(value))
        return {}
    entries: dict[str, Any] = {}
    for activity_id, entry in value.items():
        if not isinstance(entry, (Mapping, ActivityEntry)):
            _logger.warning("Dropping malformed entry for activity %r: %s", activity_id, preview_for_log(entry))
            continue
        entries[str(activity_id)] = entry if isinstance(entry, ActivityEntry) else dict(entry)
    return entries


def _read_only(entries: dict[str, ActivityEntry]) -> Mapping[str, ActivityEntry]:
    return MappingProxyType(entries)


def _entries_as_dict(entries: Mapping[str, ActivityEntry]) -> dict[str, ActivityEntry]:
    return dict(entries)


EntryMap = Annotated[
    Mapping[str, ActivityEntry],
    BeforeValidator(_coerce_entries),
    AfterValidator(_read_only),
    PlainSerializer(_entries_as_dict, return_type=dict[str, ActivityEntry]),
]
"""Per-activity entries, exposed as a read-only view of the snapshot."""


class AggregateRecord(ProgressBaseModel):
    """The account-level progress record.

    ``total_stars`` and ``total_badges`` are derived from ``per_activity``
    and are only ever recomputed by :mod:`pyprogress.state.merge`.
    """

    # Older payloads kept the per-activity mapping under the storage key's name.
    _KEY_ALIASES: ClassVar[dict[str, str]] = {"gameProgress": "perActivity"}

    level: Level = MIN_LEVEL
    experience: NonNegativeInt = 0
    total_stars: NonNegativeInt = 0
    total_badges: BadgeSet = Field(default_factory=frozenset)
    per_activity: EntryMap = Field(default_factory=dict, validate_default=True)

    @classmethod
    def default(cls) -> AggregateRecord:
        """Return the record used before anything has been reported."""
        return cls()

    @property
    def completed_activities(self) -> int:
        return sum(1 for entry in self.per_activity.values() if entry.completed)

    def entry(self, activity_id: str) -> ActivityEntry | None:
        return self.per_activity.get(activity_id)
