"""Read-only views derived from the aggregate record."""

from __future__ import annotations

from pydantic import Field

from pyprogress.models._base import BadgeSet, ProgressBaseModel


class ProgressSummary(ProgressBaseModel):
    """Dashboard figures for the account."""

    level: int
    experience: int
    total_stars: int
    badge_count: int
    completed_activities: int
    total_activities: int
    completion_percentage: int = Field(ge=0, le=100)


class RewardPreview(ProgressBaseModel):
    """Rewards an activity run would earn, shown before the run is reported."""

    activity_id: str
    score: int
    stars: int
    badges: BadgeSet = Field(default_factory=frozenset)
    first_time: bool = False
