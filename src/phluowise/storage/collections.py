"""Collection storage over a key-value backend.

Each collection is a JSON array stored under ``<prefix><name>``. Reads return
the whole array, writes replace it. There are no partial updates and no
locking: concurrent writers race and the last write wins.
"""

import json
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from phluowise.errors import StorageError
from phluowise.logging_config import get_logger
from phluowise.settings import settings
from phluowise.storage.backends import KeyValueBackend, MemoryBackend, SqlBackend
from phluowise.storage.db import Database

logger = get_logger(__name__)

AUTH_TOKEN_KEY = "auth_token"


class Collection(str, Enum):
    """Known collections."""
    USERS = "users"
    SESSIONS = "sessions"
    REFERRALS = "referrals"
    TEAMS = "teams"
    TRANSACTIONS = "transactions"
    PAYMENTS = "payments"


class RecordModel(BaseModel):
    """Base for records persisted inside a collection.

    Fields are stored with camelCase keys; unknown stored keys are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the stored JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


R = TypeVar("R", bound=RecordModel)


class Storage:
    """Whole-collection reads and writes over a backend."""

    def __init__(self, backend: KeyValueBackend, prefix: str | None = None):
        self.backend = backend
        self.prefix = settings.key_prefix if prefix is None else prefix

    def key_for(self, name: str) -> str:
        """Full backend key for a collection or scalar name."""
        return f"{self.prefix}{name}"

    def initialize(self) -> None:
        """Create every known collection as an empty array if missing."""
        for collection in Collection:
            key = self.key_for(collection.value)
            if self.backend.get_item(key) is None:
                self.backend.set_item(key, "[]")
                logger.debug("collection_initialized", key=key)

    def reset(self) -> None:
        """Delete all stored data, including the session pointer, and reinitialize."""
        self.backend.clear()
        self.initialize()
        logger.warning("storage_reset")

    # ==================== COLLECTIONS ====================

    def load(self, collection: Collection) -> list[dict[str, Any]]:
        """Load a collection.

        Args:
            collection: Collection to read

        Returns:
            Stored records, or an empty list if the key is absent

        Raises:
            StorageError: If the stored value is not a JSON array
        """
        key = self.key_for(collection.value)
        raw = self.backend.get_item(key)
        if raw is None:
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Collection {key} is not valid JSON: {e}") from e

        if not isinstance(records, list):
            raise StorageError(f"Collection {key} is not a JSON array")

        return records

    def save(self, collection: Collection, records: Iterable[dict[str, Any]]) -> None:
        """Overwrite a collection with ``records``."""
        key = self.key_for(collection.value)
        self.backend.set_item(key, json.dumps(list(records)))

    def load_models(self, collection: Collection, model: type[R]) -> list[R]:
        """Load a collection as typed records."""
        return [model.model_validate(record) for record in self.load(collection)]

    def save_models(self, collection: Collection, records: Iterable[RecordModel]) -> None:
        """Overwrite a collection with typed records."""
        self.save(collection, [record.to_record() for record in records])

    # ==================== SCALARS ====================

    def get_value(self, name: str) -> str | None:
        return self.backend.get_item(self.key_for(name))

    def set_value(self, name: str, value: str) -> None:
        self.backend.set_item(self.key_for(name), value)

    def remove_value(self, name: str) -> None:
        self.backend.remove_item(self.key_for(name))

    @property
    def current_token(self) -> str | None:
        """Token of the active session, if any."""
        return self.get_value(AUTH_TOKEN_KEY)

    def set_current_token(self, token: str) -> None:
        self.set_value(AUTH_TOKEN_KEY, token)

    def clear_current_token(self) -> None:
        self.remove_value(AUTH_TOKEN_KEY)


def build_storage(backend: str | None = None, database_url: str | None = None) -> Storage:
    """Build and initialize a storage for the configured backend."""
    backend = backend or settings.storage_backend

    if backend == "memory":
        kv_backend: KeyValueBackend = MemoryBackend()
    else:
        database = Database(database_url)
        database.create_tables()
        kv_backend = SqlBackend(database)

    storage = Storage(kv_backend)
    storage.initialize()
    return storage


@lru_cache(maxsize=1)
def get_storage() -> Storage:
    """Process-wide storage built from settings."""
    return build_storage()
