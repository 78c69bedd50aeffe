"""Reward rules for percentage-scored activity runs."""

from __future__ import annotations

from pyprogress._constants import (
    ENTRY_TIER_BADGE,
    FIRST_TIMER_BADGE,
    STAR_THRESHOLDS,
    TIER_BADGE_THRESHOLDS,
)
from pyprogress.models.record import AggregateRecord
from pyprogress.models.summary import ProgressSummary, RewardPreview


def stars_for_score(score: int) -> int:
    """Stars earned for a percentage *score* (80/60/40 thresholds)."""
    for threshold, stars in STAR_THRESHOLDS:
        if score >= threshold:
            return stars
    return 0


def tier_badge_for_score(score: int) -> str:
    for threshold, badge in TIER_BADGE_THRESHOLDS:
        if score >= threshold:
            return badge
    return ENTRY_TIER_BADGE


def preview_rewards(record: AggregateRecord, activity_id: str, score: int) -> RewardPreview:
    """Describe the stars and badges a run scoring *score* would earn.

    An activity with no stored entry also earns the first-timer badge.
    """
    first_time = record.entry(activity_id) is None
    badges = {tier_badge_for_score(score)}
    if first_time:
        badges.add(FIRST_TIMER_BADGE)
    return RewardPreview(
        activity_id=activity_id,
        score=score,
        stars=stars_for_score(score),
        badges=frozenset(badges),
        first_time=first_time,
    )


def summarize(record: AggregateRecord, total_activities: int) -> ProgressSummary:
    """Dashboard figures for *record* out of *total_activities* activities."""
    completed = record.completed_activities
    # Round half up, and never report more than everything done.
    percentage = min(100, (completed * 200 + total_activities) // (2 * total_activities))
    return ProgressSummary(
        level=record.level,
        experience=record.experience,
        total_stars=record.total_stars,
        badge_count=len(record.total_badges),
        completed_activities=completed,
        total_activities=total_activities,
        completion_percentage=percentage,
    )
