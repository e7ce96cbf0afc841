"""
Storage interface.

Defines the contract every message storage backend implements.
"""

from abc import ABC, abstractmethod

from mailhog_server.storage.models import Message, SearchKind


class Storage(ABC):
    """
    Abstract base class for message storage backends.

    Implementations persist captured messages and serve them back to the
    API, newest first.
    """

    @abstractmethod
    def store(self, message: Message) -> str:
        """
        Store a message.

        Args:
            message: Message to store

        Returns:
            The stored message ID.
        """
        pass

    @abstractmethod
    def load(self, message_id: str) -> Message | None:
        """
        Load a single message.

        Returns:
            The message, or None if no message has that ID.
        """
        pass

    @abstractmethod
    def list_messages(self, start: int = 0, limit: int = 50) -> list[Message]:
        """
        List messages, newest first.

        Args:
            start: Number of messages to skip
            limit: Maximum number of messages to return
        """
        pass

    @abstractmethod
    def search(
        self,
        kind: SearchKind,
        query: str,
        start: int = 0,
        limit: int = 50,
    ) -> tuple[list[Message], int]:
        """
        Search messages.

        Returns:
            Tuple of (page of matching messages, total number of matches)
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Get total number of stored messages."""
        pass

    @abstractmethod
    def delete_one(self, message_id: str) -> bool:
        """
        Delete a message.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Delete every stored message."""
        pass
