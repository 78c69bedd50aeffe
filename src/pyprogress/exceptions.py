"""Custom exception hierarchy for pyprogress."""

from __future__ import annotations


class ProgressError(Exception):
    """Base exception for all pyprogress errors."""


class ProgressConfigError(ProgressError):
    """Invalid or missing configuration."""


class CorruptRecordError(ProgressError):
    """Stored payload could not be parsed into an aggregate record.

    Raised by :func:`pyprogress.storage.record_store.decode_record`.
    :meth:`RecordStore.read` catches it and substitutes the default
    record, so callers of the store never see it.
    """


class PersistenceError(ProgressError):
    """The aggregate record could not be durably stored.

    The previously persisted value is left untouched.  This is the one
    error surfaced to callers of :meth:`ProgressReporter.report`.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class StorageQuotaExceededError(PersistenceError):
    """The storage backend refused the write because it is full."""

    def __init__(
        self,
        message: str,
        *,
        key: str = "",
        quota_bytes: int | None = None,
        requested_bytes: int | None = None,
    ) -> None:
        self.quota_bytes = quota_bytes
        self.requested_bytes = requested_bytes
        super().__init__(message, key=key)
