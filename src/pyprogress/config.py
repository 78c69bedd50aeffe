"""Store configuration for pyprogress."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pyprogress._constants import DEFAULT_TOTAL_ACTIVITIES, STORAGE_KEY
from pyprogress.exceptions import ProgressConfigError
from pyprogress.storage.backends import is_plain_key


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ProgressConfigError(f"{env_key} must be an integer, got {value!r}") from exc


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value.strip())
    except ValueError as exc:
        raise ProgressConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ProgressConfig:
    """Progress store configuration.

    Parameters
    ----------
    storage_dir : Path or None
        Directory holding the durable record.  Every process pointing
        at the same directory shares one record.  ``None`` keeps the
        record in memory for the lifetime of the process.
    storage_key : str
        Well-known name the aggregate record is stored under.
    total_activities : int
        Number of activities available, used for completion summaries.
    poll_interval : float
        Seconds between revision checks of the cross-context watcher.
    """

    storage_dir: Path | None = None
    storage_key: str = STORAGE_KEY
    total_activities: int = DEFAULT_TOTAL_ACTIVITIES
    poll_interval: float = 1.0

    def __post_init__(self) -> None:
        if self.storage_dir is not None and not isinstance(self.storage_dir, Path):
            object.__setattr__(self, "storage_dir", Path(self.storage_dir))
        if not self.storage_key.strip():
            raise ProgressConfigError("storage_key must be non-empty")
        if not is_plain_key(self.storage_key):
            raise ProgressConfigError(f"storage_key must be a plain file name, got {self.storage_key!r}")
        if self.total_activities < 1:
            raise ProgressConfigError(f"total_activities must be at least 1, got {self.total_activities}")
        if self.poll_interval <= 0:
            raise ProgressConfigError(f"poll_interval must be positive, got {self.poll_interval}")

    @classmethod
    def from_env(cls, **overrides: Any) -> ProgressConfig:
        """Create configuration from environment variables.

        Reads ``PROGRESS_STORAGE_DIR``, ``PROGRESS_STORAGE_KEY``,
        ``PROGRESS_TOTAL_ACTIVITIES`` and ``PROGRESS_POLL_INTERVAL``.
        Explicit keyword arguments override environment values.

        Raises
        ------
        ProgressConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        storage_dir = env.get("PROGRESS_STORAGE_DIR")
        if storage_dir:
            config_kwargs["storage_dir"] = Path(storage_dir).expanduser()

        storage_key = env.get("PROGRESS_STORAGE_KEY")
        if storage_key is not None:
            config_kwargs["storage_key"] = storage_key

        total_env = env.get("PROGRESS_TOTAL_ACTIVITIES")
        if total_env is not None and "total_activities" not in overrides:
            config_kwargs["total_activities"] = _env_int("PROGRESS_TOTAL_ACTIVITIES", total_env)

        interval_env = env.get("PROGRESS_POLL_INTERVAL")
        if interval_env is not None and "poll_interval" not in overrides:
            config_kwargs["poll_interval"] = _env_float("PROGRESS_POLL_INTERVAL", interval_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
