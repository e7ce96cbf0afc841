"""
In-memory message storage.
"""

import threading

from mailhog_server.logging import get_logger
from mailhog_server.storage.base import Storage
from mailhog_server.storage.models import Message, SearchKind

logger = get_logger(__name__)


class InMemoryStorage(Storage):
    """
    Process-local storage.

    Messages are lost on restart. Thread-safe.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._messages: list[Message] = []
        self._index: dict[str, Message] = {}

    def store(self, message: Message) -> str:
        with self._lock:
            if message.id in self._index:
                self._messages = [m for m in self._messages if m.id != message.id]
            self._messages.append(message)
            self._index[message.id] = message
        logger.debug("Stored message %s in memory", message.id)
        return message.id

    def load(self, message_id: str) -> Message | None:
        with self._lock:
            return self._index.get(message_id)

    def _newest_first(self) -> list[Message]:
        with self._lock:
            return list(reversed(self._messages))

    def list_messages(self, start: int = 0, limit: int = 50) -> list[Message]:
        return self._newest_first()[start : start + limit]

    def search(
        self,
        kind: SearchKind,
        query: str,
        start: int = 0,
        limit: int = 50,
    ) -> tuple[list[Message], int]:
        matches = [m for m in self._newest_first() if m.matches(kind, query)]
        return matches[start : start + limit], len(matches)

    def count(self) -> int:
        with self._lock:
            return len(self._messages)

    def delete_one(self, message_id: str) -> bool:
        with self._lock:
            if message_id not in self._index:
                return False
            del self._index[message_id]
            self._messages = [m for m in self._messages if m.id != message_id]
            return True

    def delete_all(self) -> None:
        with self._lock:
            self._messages.clear()
            self._index.clear()
