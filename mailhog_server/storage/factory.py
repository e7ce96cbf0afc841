"""
Storage backend selection.

Maps the configured storage kind onto one of the storage variants. The
remote backend degrades to memory when unreachable; the substitution is
returned as a StorageEvent for the caller to report.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from mailhog_server.config import Settings
from mailhog_server.errors import BackendUnavailableError, FatalConfigError
from mailhog_server.storage.base import Storage
from mailhog_server.storage.maildir import MaildirStorage
from mailhog_server.storage.memory import InMemoryStorage
from mailhog_server.storage.mongodb import MongoStorage


class StorageKind(str, Enum):
    """Supported storage backends."""

    MEMORY = "memory"
    MAILDIR = "maildir"
    MONGODB = "mongodb"


@dataclass(frozen=True)
class StorageEvent:
    """Something noteworthy that happened while selecting storage."""

    kind: str
    detail: str


@dataclass(frozen=True)
class StorageSelection:
    """Result of storage selection: the live handle and the kind it implements."""

    storage: Storage
    kind: StorageKind
    requested: StorageKind
    event: StorageEvent | None = None

    @property
    def substituted(self) -> bool:
        return self.kind != self.requested


class StorageFactory(Protocol):
    def __call__(self, kind: str, settings: Settings) -> StorageSelection: ...


def parse_storage_kind(kind: str) -> StorageKind:
    """
    Resolve a storage kind name.

    Raises:
        FatalConfigError: If the name is not a supported backend
    """
    try:
        return StorageKind(kind)
    except ValueError:
        raise FatalConfigError(f"Invalid storage type {kind}") from None


def create_storage(kind: str, settings: Settings) -> StorageSelection:
    """
    Create the storage backend named by kind.

    Args:
        kind: Storage kind name (memory, maildir or mongodb)
        settings: Backend parameters

    Returns:
        StorageSelection with the live storage handle

    Raises:
        FatalConfigError: If kind is not a supported backend
    """
    requested = parse_storage_kind(kind)

    if requested == StorageKind.MEMORY:
        return StorageSelection(InMemoryStorage(), requested, requested)

    if requested == StorageKind.MAILDIR:
        return StorageSelection(MaildirStorage(settings.maildir_path), requested, requested)

    try:
        storage = MongoStorage(
            settings.mongo_uri,
            settings.mongo_db,
            settings.mongo_coll,
            timeout_ms=settings.mongo_timeout_ms,
        )
    except BackendUnavailableError as e:
        return StorageSelection(
            InMemoryStorage(),
            StorageKind.MEMORY,
            requested,
            event=StorageEvent(
                kind="storage_fallback",
                detail=f"MongoDB storage unavailable, reverting to in-memory storage ({e})",
            ),
        )
    return StorageSelection(storage, requested, requested)
