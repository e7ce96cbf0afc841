"""
Message storage backends.

- InMemoryStorage: process-local, lost on restart
- MaildirStorage: one file per message under a directory
- MongoStorage: MongoDB collection
"""

from mailhog_server.storage.base import Storage
from mailhog_server.storage.factory import (
    StorageEvent,
    StorageKind,
    StorageSelection,
    create_storage,
)
from mailhog_server.storage.maildir import MaildirStorage
from mailhog_server.storage.memory import InMemoryStorage
from mailhog_server.storage.models import Message, SearchKind
from mailhog_server.storage.mongodb import MongoStorage

__all__ = [
    "InMemoryStorage",
    "MaildirStorage",
    "Message",
    "MongoStorage",
    "SearchKind",
    "Storage",
    "StorageEvent",
    "StorageKind",
    "StorageSelection",
    "create_storage",
]
