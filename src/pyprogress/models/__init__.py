"""Progress data models."""

from pyprogress.models.record import ActivityEntry, AggregateRecord
from pyprogress.models.result import ActivityResult
from pyprogress.models.summary import ProgressSummary, RewardPreview

__all__ = [
    "ActivityEntry",
    "ActivityResult",
    "AggregateRecord",
    "ProgressSummary",
    "RewardPreview",
]
