"""Durable key-value slots for serialized records."""

from __future__ import annotations

import errno
import logging
import os
import tempfile
from collections.abc import Hashable
from pathlib import Path
from typing import Protocol

from pyprogress.exceptions import PersistenceError, StorageQuotaExceededError

_logger = logging.getLogger(__name__)

_QUOTA_ERRNOS = frozenset({errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)})
_KEY_SEPARATORS = frozenset(sep for sep in ("/", "\\", os.sep, os.altsep, "\x00") if sep)


def is_plain_key(key: str) -> bool:
    """Return whether *key* names a file directly inside a storage directory."""
    return bool(key) and key not in (".", "..") and not any(sep in key for sep in _KEY_SEPARATORS)


class StorageBackend(Protocol):
    """A string-valued key-value slot.

    ``revision`` returns an opaque token that changes whenever the value
    under *key* changes, whichever process or store changed it, and
    ``None`` when nothing is stored.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def revision(self, key: str) -> Hashable | None: ...


class MemoryBackend:
    """In-process backend.

    Every :class:`RecordStore` built on the same instance shares the
    slot, like two views of one browser storage area.  ``quota_bytes``
    limits the total UTF-8 size of all stored values.
    """

    def __init__(self, *, quota_bytes: int | None = None) -> None:
        self._quota_bytes = quota_bytes
        self._values: dict[str, str] = {}
        self._revisions: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self._values.items() if k != key)
            requested = others + len(value.encode("utf-8"))
            if requested > self._quota_bytes:
                raise StorageQuotaExceededError(
                    f"Storing {key!r} needs {requested} bytes, quota is {self._quota_bytes}",
                    key=key,
                    quota_bytes=self._quota_bytes,
                    requested_bytes=requested,
                )
        self._values[key] = value
        self._revisions[key] = self._revisions.get(key, 0) + 1

    def revision(self, key: str) -> Hashable | None:
        if key not in self._values:
            return None
        return self._revisions[key]


class FileBackend:
    """One JSON file per key inside *directory*.

    Values survive process restarts, and every process pointing at the
    same directory sees the same slot.  Writes go to a temporary file
    that atomically replaces the old one, so a failed write leaves the
    previous value intact.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        if not is_plain_key(key):
            raise ValueError(f"Storage key {key!r} is not a plain file name")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        try:
            return self.path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._directory,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            if exc.errno in _QUOTA_ERRNOS:
                raise StorageQuotaExceededError(f"No space left to store {key!r} in {path}", key=key) from exc
            raise PersistenceError(f"Failed to store {key!r} in {path}: {exc}", key=key) from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    _logger.debug("Could not remove temporary file %s", tmp_name, exc_info=True)

    def revision(self, key: str) -> Hashable | None:
        try:
            stat = self.path_for(key).stat()
        except FileNotFoundError:
            return None
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)
