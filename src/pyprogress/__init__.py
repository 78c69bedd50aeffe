"""pyprogress - Progress aggregation and leveling store for activity results."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyprogress")
except PackageNotFoundError:
    __version__ = "0+local"
from pyprogress.config import ProgressConfig
from pyprogress.exceptions import (
    CorruptRecordError,
    PersistenceError,
    ProgressConfigError,
    ProgressError,
    StorageQuotaExceededError,
)
from pyprogress.models import (
    ActivityEntry,
    ActivityResult,
    AggregateRecord,
    ProgressSummary,
    RewardPreview,
)
from pyprogress.reporter import ProgressReporter
from pyprogress.state.merge import FoldOutcome, LevelProgress, fold, fold_with_outcome, resolve_level
from pyprogress.state.notifier import ChangeNotifier, Subscription
from pyprogress.state.watcher import StoreWatcher
from pyprogress.storage import FileBackend, MemoryBackend, RecordStore, StorageBackend

__all__ = [
    "__version__",
    "ActivityEntry",
    "ActivityResult",
    "AggregateRecord",
    "ChangeNotifier",
    "CorruptRecordError",
    "FileBackend",
    "FoldOutcome",
    "LevelProgress",
    "MemoryBackend",
    "PersistenceError",
    "ProgressConfig",
    "ProgressConfigError",
    "ProgressError",
    "ProgressReporter",
    "ProgressSummary",
    "RecordStore",
    "RewardPreview",
    "StorageBackend",
    "StorageQuotaExceededError",
    "StoreWatcher",
    "Subscription",
    "fold",
    "fold_with_outcome",
    "resolve_level",
]
