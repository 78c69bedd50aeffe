"""Persistence layer for the aggregate record."""

from pyprogress.storage.backends import FileBackend, MemoryBackend, StorageBackend
from pyprogress.storage.record_store import RecordStore, decode_record, encode_record

__all__ = [
    "FileBackend",
    "MemoryBackend",
    "RecordStore",
    "StorageBackend",
    "decode_record",
    "encode_record",
]
