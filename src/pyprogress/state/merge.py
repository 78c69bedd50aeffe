"""Deterministic progress merge engine.

This module intentionally contains *no* producer validation.  The
reporting boundary (:class:`pyprogress.models.ActivityResult`) is
responsible for clamping stars and coercing scores; the functions here
are pure and total over well-formed input and never mutate it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from pyprogress._constants import EXPERIENCE_PER_LEVEL, MIN_LEVEL, POINTS_PER_EXPERIENCE
from pyprogress.models.record import ActivityEntry, AggregateRecord
from pyprogress.models.result import ActivityResult


@dataclass(frozen=True)
class LevelProgress:
    """Level and experience after applying an experience gain."""

    level: int
    experience: int
    levels_gained: int


@dataclass(frozen=True)
class FoldOutcome:
    """A folded record plus the values derived while folding it."""

    record: AggregateRecord
    experience_gained: int
    levels_gained: int

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0


def experience_for_score(score: int) -> int:
    """Experience granted for an activity score (one point per ten)."""
    return score // POINTS_PER_EXPERIENCE


def resolve_level(level: int, experience: int, gain: int) -> LevelProgress:
    """Fold *gain* into ``(level, experience)``.

    Any overflow past a level boundary is carried into the level, however
    many boundaries it crosses.  The resulting experience is always in
    ``[0, EXPERIENCE_PER_LEVEL)``.
    """
    levels_gained, remaining = divmod(experience + gain, EXPERIENCE_PER_LEVEL)
    return LevelProgress(level=level + levels_gained, experience=remaining, levels_gained=levels_gained)


def total_stars(entries: Mapping[str, ActivityEntry]) -> int:
    return sum(entry.stars for entry in entries.values())


def total_badges(entries: Mapping[str, ActivityEntry]) -> frozenset[str]:
    badges: set[str] = set()
    for entry in entries.values():
        badges.update(entry.badges)
    return frozenset(badges)


def fold_with_outcome(current: AggregateRecord, activity_id: str, result: ActivityResult) -> FoldOutcome:
    """Fold one activity result into *current*, reporting level-up details."""
    # Re-reporting an activity replaces its entry; totals are then rebuilt
    # from scratch so replays can never double count.
    entries = dict(current.per_activity)
    entries[activity_id] = ActivityEntry(
        completed=result.completed,
        score=result.score,
        stars=result.stars,
        badges=result.badges,
    )

    gain = experience_for_score(result.score)
    progress = resolve_level(current.level, current.experience, gain)

    record = AggregateRecord(
        level=progress.level,
        experience=progress.experience,
        total_stars=total_stars(entries),
        total_badges=total_badges(entries),
        per_activity=entries,
    )
    return FoldOutcome(record=record, experience_gained=gain, levels_gained=progress.levels_gained)


def fold(current: AggregateRecord, activity_id: str, result: ActivityResult) -> AggregateRecord:
    """Return a new record with *result* merged in for *activity_id*."""
    return fold_with_outcome(current, activity_id, result).record


def normalize(record: AggregateRecord) -> AggregateRecord:
    """Restore the record invariants on externally supplied data.

    Derived totals are rebuilt from the per-activity entries and any
    experience at or past a level boundary is carried into the level.
    Returns *record* itself when it already satisfies the invariants.
    """
    progress = resolve_level(max(MIN_LEVEL, record.level), record.experience, 0)
    stars = total_stars(record.per_activity)
    badges = total_badges(record.per_activity)
    if (
        progress.level == record.level
        and progress.experience == record.experience
        and stars == record.total_stars
        and badges == record.total_badges
    ):
        return record
    return record.model_copy(
        update={
            "level": progress.level,
            "experience": progress.experience,
            "total_stars": stars,
            "total_badges": badges,
        }
    )
