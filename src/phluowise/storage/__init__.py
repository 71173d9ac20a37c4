"""Persistence: key-value backends and JSON collections."""

from phluowise.storage.backends import KeyValueBackend, MemoryBackend, SqlBackend
from phluowise.storage.collections import (
    Collection,
    RecordModel,
    Storage,
    build_storage,
    get_storage,
)
from phluowise.storage.db import Database

__all__ = [
    "Collection",
    "Database",
    "KeyValueBackend",
    "MemoryBackend",
    "RecordModel",
    "SqlBackend",
    "Storage",
    "build_storage",
    "get_storage",
]
