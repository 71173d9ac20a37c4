"""Key-value backends holding serialized collections.

A backend stores opaque strings under string keys, the same contract as
browser local storage. ``Storage`` layers JSON collections on top.
"""

from abc import ABC, abstractmethod

from sqlalchemy import select

from phluowise.logging_config import get_logger
from phluowise.storage.db import Database
from phluowise.storage.models import KeyValueEntry

logger = get_logger(__name__)


class KeyValueBackend(ABC):
    """String key to string value store."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value under ``key`` or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every key."""


class MemoryBackend(KeyValueBackend):
    """In-process backend, used by tests and the ``memory`` setting."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()


class SqlBackend(KeyValueBackend):
    """Backend persisting each key as a row in ``kv_entries``."""

    def __init__(self, database: Database):
        self.database = database

    def get_item(self, key: str) -> str | None:
        with self.database.session() as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with self.database.session() as session:
            entry = session.get(KeyValueEntry, key)
            if entry:
                entry.value = value
            else:
                session.add(KeyValueEntry(key=key, value=value))

    def remove_item(self, key: str) -> None:
        with self.database.session() as session:
            entry = session.get(KeyValueEntry, key)
            if entry:
                session.delete(entry)
                logger.debug("kv_entry_removed", key=key)

    def keys(self) -> list[str]:
        with self.database.session() as session:
            return list(session.scalars(select(KeyValueEntry.key).order_by(KeyValueEntry.key)))

    def clear(self) -> None:
        """Drop and recreate the table."""
        self.database.drop_tables()
        self.database.create_tables()
